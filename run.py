# Root launcher for the pricing API.
import logging
from pathlib import Path
import sys

BASE = Path(__file__).resolve().parent
sys.path.insert(0, str(BASE / "backend"))  # allow 'from windowquote import create_app' without installing

from windowquote import create_app  # type: ignore

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    # You can change host/port here if needed
    app.run(host="127.0.0.1", port=5050, debug=True)
