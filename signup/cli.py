#!/usr/bin/env python3
"""
Terminal front end for the signup wizard

Walks through the four steps against a running signup API and prints the
assembled payload as JSON. Also starts the API server itself.
"""

import argparse
import getpass
import json
import logging

from colorama import init, Fore, Style

from .client import SignupApiClient
from .config import get_config
from .wizard import SignupWizard

init(autoreset=True)

BACK = ":back"
RESEND = ":resend"
QUIT = ":quit"


class QuitWizard(Exception):
    pass


def _ask(label: str, secret: bool = False) -> str:
    prompt = f"{Fore.YELLOW}{label}: {Style.RESET_ALL}"
    value = getpass.getpass(prompt) if secret else input(prompt)
    value = value.strip()
    if value == QUIT:
        raise QuitWizard()
    return value


def _print_errors(errors):
    for field, message in errors.items():
        print(f"{Fore.RED}  {field}: {message}{Style.RESET_ALL}")


def _print_message(message, color=Fore.RED):
    if message:
        print(f"{color}{message}{Style.RESET_ALL}")


def _account_step(wizard: SignupWizard):
    step = wizard.step
    first_name = _ask("First name")
    last_name = _ask("Last name")
    work_email = _ask("Work email")
    accept = _ask("Accept the terms and conditions? [y/N]").lower() in ("y", "yes")
    wizard.set_fields(first_name=first_name, last_name=last_name,
                      work_email=work_email, accept_terms=accept)

    print("Checking your email and sending a code...")
    result = step.next()
    _print_errors(result.errors)
    _print_message(result.message)
    if step.duplicate_message:
        print(f"  Log in here: {step.login_url}")


def _verification_step(wizard: SignupWizard):
    step = wizard.step
    if wizard.email_verified:
        print(f"{wizard.state.work_email} is verified. Press Enter to continue or type {BACK} to go back.")
        if _ask("Continue") == BACK:
            step.back()
        else:
            step.next()
        return

    print(f"We sent a 6-digit code to {wizard.state.work_email}.")
    print(f"Type {RESEND} for a new code ({step.resend_label}) or {BACK} to go back.")
    value = _ask("Code")

    if value == BACK:
        step.back()
        return
    if value == RESEND:
        if not step.can_resend:
            _print_message(f"Please wait: {step.resend_label}", Fore.YELLOW)
        elif step.resend():
            _print_message(step.notice, Fore.GREEN)
        else:
            _print_message(step.notice)
        return

    wizard.set_fields(verification_code=value)
    print("Verifying...")
    result = step.next()
    _print_errors(result.errors)
    _print_message(result.message)


def _password_step(wizard: SignupWizard):
    step = wizard.step
    print(f"Type {BACK} to go back.")
    password = _ask("Password", secret=True)
    if password == BACK:
        step.back()
        return
    confirm = _ask("Confirm password", secret=True)
    wizard.set_fields(password=password, confirm_password=confirm)
    _print_errors(step.next().errors)


def _business_step(wizard: SignupWizard):
    step = wizard.step
    state = wizard.state
    print(f"Press enter to keep a value, type {BACK} to go back.")
    values = {}
    for field, label in (("company_name", "Company name"), ("industry", "Industry"),
                         ("country", "Country"), ("website", "Website")):
        value = _ask(f"{label} [{getattr(state, field)}]")
        if value == BACK:
            step.back()
            return
        if value:
            values[field] = value
    if values:
        wizard.set_fields(**values)

    print("Creating your account...")
    result = step.next()
    _print_errors(result.errors)
    _print_message(result.message)


STEP_HANDLERS = {
    1: _account_step,
    2: _verification_step,
    3: _password_step,
    4: _business_step,
}


def interactive_mode(api_url: str, timeout: float):
    """Run the wizard until the account payload is shown or the user quits"""
    config = get_config()
    client = SignupApiClient(api_url, timeout=timeout)

    with SignupWizard(client, config=config) as wizard:
        print(f"\n{Fore.MAGENTA}=== Create your account ==={Style.RESET_ALL}")
        print(f"Enter '{QUIT}' at any prompt to exit\n")

        try:
            while True:
                if wizard.is_submitted:
                    print(f"\n{Fore.GREEN}Account created{Style.RESET_ALL}")
                    print(json.dumps(wizard.payload, indent=2))
                    again = _ask("Start over? [y/N]").lower()
                    if again not in ("y", "yes"):
                        break
                    wizard.restart()
                    continue

                step = wizard.step
                print(f"\n{Fore.CYAN}{wizard.progress_label} - {step.title}{Style.RESET_ALL}")
                STEP_HANDLERS[wizard.current_step](wizard)
        except (QuitWizard, KeyboardInterrupt, EOFError):
            print("\nBye.")


def main():
    config = get_config()

    parser = argparse.ArgumentParser(description="Work-email signup wizard")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    wizard_parser = subparsers.add_parser("wizard", help="Run the signup wizard (default)")
    wizard_parser.add_argument("--api-url", default=config.SIGNUP_API_URL, help="Signup API base URL")
    wizard_parser.add_argument("--timeout", type=float, default=config.HTTP_TIMEOUT_SECONDS,
                               help="HTTP timeout in seconds")

    server_parser = subparsers.add_parser("serve", help="Run the signup API server")
    server_parser.add_argument("--port", type=int, default=config.PORT, help="Server port")
    server_parser.add_argument("--host", default="0.0.0.0", help="Server host")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.command == "serve":
        from .app import create_app
        create_app(config).run(host=args.host, port=args.port)
    elif args.command == "wizard":
        interactive_mode(args.api_url, args.timeout)
    else:
        interactive_mode(config.SIGNUP_API_URL, config.HTTP_TIMEOUT_SECONDS)


if __name__ == "__main__":
    main()
