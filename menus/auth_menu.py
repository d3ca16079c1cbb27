import webbrowser

import questionary
from config import CONFIG_SCHEMA, update_config, validate_config
from deezer_api.auth import (
    DeezerAuthSession,
    check_deezer_credentials,
    deezer_app_setup_instructions,
)
from deezer_api.errors import DeezerAuthError
from utils.logger import log_info, log_error, log_success, log_warning


def auth_menu(config: dict, session: DeezerAuthSession) -> DeezerAuthSession:
    """
    Display the Deezer authorization menu and handle user selections.
    Returns the session (authorized or not) when the user leaves the menu.
    """
    while True:
        choice = questionary.select(
            f"🎵 Deezer Auth ({session.status().name}) — What would you like to do?",
            choices=[
                "Start authorization",
                "Paste redirect URL",
                "Paste access token",
                "Show status",
                "Check configuration",
                "Update a setting",
                "Exit",
            ]
        ).ask()

        if choice == "Start authorization":
            start_authorization(config, session)

        elif choice == "Paste redirect URL":
            redirect = questionary.text("Paste the full URL Deezer redirected you to:").ask()
            complete_authorization(session, redirect or "")

        elif choice == "Paste access token":
            token = questionary.password("Access token:").ask()
            if session.save_token(token or ""):
                log_success("Token stored for this session.")
            elif token:
                log_warning("Authorization already completed; start a new authorization instead.")
            else:
                log_warning("No token entered.")

        elif choice == "Show status":
            show_status(session)

        elif choice == "Check configuration":
            check_configuration(config)

        elif choice == "Update a setting":
            config = update_setting_menu(config)

        elif choice == "Exit" or choice is None:
            break

    return session


def start_authorization(config: dict, session: DeezerAuthSession) -> str:
    """Build the authorize URL, print it and optionally open it in a browser."""
    url = session.authorize_url(config.get("deezer_redirect_uri", ""))
    print(f"\nOpen this URL and grant access:\n{url}\n")
    if config.get("open_browser", True):
        try:
            webbrowser.open(url)
        except webbrowser.Error as e:
            log_warning(f"Could not open a browser: {e}")
    log_info("Waiting for the redirect URL...")
    return url


def complete_authorization(session: DeezerAuthSession, redirect: str) -> bool:
    """Extract the code from ``redirect`` and exchange it. Returns True on success."""
    try:
        code = session.extract_code(redirect)
        session.exchange_token(code)
    except DeezerAuthError as e:
        log_error(f"Authorization failed: {e}")
        return False

    log_success(f"Deezer authorization completed (token expires in {session.expiry()}s).")
    return True


def show_status(session: DeezerAuthSession):
    """Print the session status without revealing the token."""
    print("\n" + "=" * 50)
    print("🔐 Deezer Authorization")
    print("=" * 50)
    print(f"  app_id: {session.credentials.app_id}")
    print(f"  status: {session.status().name}")
    print(f"  token:  {'✓ held' if session.token() else '✗ none'}")
    print(f"  expiry: {session.expiry() or '-'}")
    print("=" * 50 + "\n")


def check_configuration(config: dict) -> bool:
    """Validate config.json and report Deezer credential problems."""
    is_valid, errors = validate_config(config)
    for err in errors:
        log_error(err)

    status = check_deezer_credentials(config)
    if status["ok"]:
        log_success(status["message"])
    else:
        log_warning(status["message"])
        print(deezer_app_setup_instructions(redirect_uri=status["redirect_uri"]))

    return is_valid and status["ok"]


def update_setting_menu(config: dict) -> dict:
    """Menu to update individual settings."""
    editable_keys = list(CONFIG_SCHEMA.keys())
    editable_keys.append("Back")

    key = questionary.select(
        "Select setting to update:",
        choices=editable_keys
    ).ask()

    if key == "Back" or key is None:
        return config

    schema = CONFIG_SCHEMA.get(key, {})

    if schema.get("type") == bool:
        new_value = questionary.confirm(
            f"Enable {key}?",
            default=bool(config.get(key, False))
        ).ask()
    elif schema.get("secret"):
        new_value = questionary.password(f"Enter new value for {key}:").ask()
    elif schema.get("type") == (int, float):
        raw = questionary.text(
            f"Enter new value for {key} ({schema.get('min', 0)}-{schema.get('max', 9999)}):",
            default=str(config.get(key, ""))
        ).ask()
        try:
            new_value = float(raw)
        except (TypeError, ValueError):
            log_error(f"Invalid number: {raw}")
            return config
    else:
        new_value = questionary.text(
            f"Enter new value for {key}:",
            default=str(config.get(key, ""))
        ).ask()

    if new_value is None:
        return config

    success, message = update_config(key, new_value)
    if success:
        config[key] = new_value
        log_success(message)
        log_info("Restart to apply credential changes to the current session.")
    else:
        log_error(message)

    return config
