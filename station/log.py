import logging
import os


def setup_logging(debug: bool = False) -> None:
    """Configure logging with a debug level toggle."""
    env_debug = os.environ.get("INDIGO_DEBUG", "false").lower() == "true"
    level = logging.DEBUG if debug or env_debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        handlers=[logging.StreamHandler()]
    )
    # Werkzeug request lines are noise outside debug mode
    if level > logging.DEBUG:
        logging.getLogger("werkzeug").setLevel(logging.WARNING)
