"""
Route planner – main application entry point

* Flask app serving the ``/api`` route, review, auth and upload endpoints.
* Routes are generated by an OpenAI-compatible model and geocoded with the
  provider selected by ``GEOCODER_PROVIDER``.
* Storage is in memory; restarting the process drops users and routes.
"""

import os
import logging

from dotenv import load_dotenv

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

if "JWT_SECRET" not in os.environ:
    os.environ["JWT_SECRET"] = os.urandom(32).hex()
    logger.warning("No JWT_SECRET found. Generated a temporary key.")

# --------------------------------------------------------------------------- #
# Flask initialisation
# --------------------------------------------------------------------------- #
from route_planner.api.config import get_port  # noqa: E402
from route_planner.app import create_app  # noqa: E402

app = create_app()

# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    port = get_port()
    logger.info("Starting route planner on http://localhost:%d", port)
    app.run(host="0.0.0.0", port=port, debug=False)

__all__ = ["app"]
