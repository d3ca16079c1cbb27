import json
import sys

from config import load_config, validate_config
from deezer_api.auth import check_deezer_credentials, deezer_app_setup_instructions, session_from_config
from utils.logger import setup_logging, log_info, log_error
from menus.auth_menu import auth_menu


def main() -> int:
    setup_logging()

    try:
        config = load_config()
    except FileNotFoundError as e:
        log_error(f"Config file not found: {e}")
        log_error("Please create config.json with deezer_app_id and deezer_app_secret.")
        print(deezer_app_setup_instructions())
        return 1
    except json.JSONDecodeError as e:
        log_error(f"Config file contains invalid JSON: {e}")
        return 1

    status = check_deezer_credentials(config)
    if not status["ok"]:
        log_error(status["message"])
        print(deezer_app_setup_instructions(redirect_uri=status["redirect_uri"]))
        return 1

    is_valid, errors = validate_config(config)
    if not is_valid:
        for err in errors:
            log_error(f"Invalid config: {err}")
        return 1

    session = session_from_config(config)
    session = auth_menu(config, session)

    log_info(f"Exiting program (status: {session.status().name})...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
