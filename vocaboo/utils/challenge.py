from vocaboo.utils.helpers import _round_half_up

DAILY_CHALLENGES = [
    {
        "id": 1,
        "word": "ephemeral",
        "definition": "Choose the correct meaning of 'ephemeral':",
        "options": ["Lasting for a very short time", "Extremely beautiful", "Very old", "Mysterious"],
        "correct_answer": "Lasting for a very short time",
    },
    {
        "id": 2,
        "word": "serendipity",
        "definition": "What does 'serendipity' mean?",
        "options": ["Good luck", "Finding something good by accident", "A peaceful place", "Sadness"],
        "correct_answer": "Finding something good by accident",
    },
    {
        "id": 3,
        "word": "melancholy",
        "definition": "Select the meaning of 'melancholy':",
        "options": ["Joyful", "Deep sadness or gloom", "Angry", "Confused"],
        "correct_answer": "Deep sadness or gloom",
    },
    {
        "id": 4,
        "word": "eloquent",
        "definition": "What does 'eloquent' describe?",
        "options": ["Speaking fluently and persuasively", "Being quiet", "Moving quickly", "Eating slowly"],
        "correct_answer": "Speaking fluently and persuasively",
    },
    {
        "id": 5,
        "word": "resilient",
        "definition": "Choose the correct meaning of 'resilient':",
        "options": ["Weak", "Able to recover quickly", "Very tall", "Colorful"],
        "correct_answer": "Able to recover quickly",
    },
]

def _public_questions():
    return [{k: v for k, v in q.items() if k != "correct_answer"} for q in DAILY_CHALLENGES]

def _score_answers(answers):
    """Answers are matched to questions by position; missing ones count as wrong."""
    answers = answers if isinstance(answers, list) else []
    results = []
    for i, q in enumerate(DAILY_CHALLENGES):
        given = answers[i] if i < len(answers) else None
        results.append({
            "id": q["id"],
            "word": q["word"],
            "answer": given,
            "correct": given == q["correct_answer"],
            "correct_answer": q["correct_answer"],
        })
    score = sum(1 for r in results if r["correct"])
    total = len(DAILY_CHALLENGES)
    return {
        "score": score,
        "total": total,
        "percentage": _round_half_up(score / total * 100),
        "results": results,
    }
