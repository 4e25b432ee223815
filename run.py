import os
from dotenv import load_dotenv

# Load environment variables before the config singleton is built
load_dotenv()

from vocaboo import create_app

app = create_app()

if __name__ == '__main__':
    port = int(os.environ.get("PORT", 7860))
    debug = os.environ.get("FLASK_DEBUG", "").lower() in ("1", "true")
    app.run(host='0.0.0.0', port=port, debug=debug, use_reloader=False)
