import sys
from pathlib import Path

SRC = Path(__file__).resolve().parent / "src" / "school_portal"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from school_portal.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config["DEBUG"])
