#!/usr/bin/env python3
"""
Terminal front end for the aiRchive signup wizard.

Walks through the three signup steps against a running backend:
- Account: every field is live-validated while you type
- Roles: optional author request and admin verification
- Topics: pick topics of interest

Examples:
    python run_signup.py
    python run_signup.py --base-url http://localhost:8080/airchive/api --per-field
    python run_signup.py --keystrokes   # feed values one character at a time
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import sys

from loguru import logger

from config import settings
from signup.app import create_signup_wizard, setup_logging
from signup.errors import WizardTransitionError
from signup.schemas import FieldKind, FieldStatus, FieldValidationState, StepOutcome, StepResult
from signup.services import AccountStep, RoleStep, SignupWizard, TopicsStep

_STATUS_MARK = {
    FieldStatus.IDLE: " ",
    FieldStatus.VALIDATING: "…",
    FieldStatus.VALID: "✓",
    FieldStatus.INVALID: "✗",
}


async def _ask(prompt: str, secret: bool = False) -> str:
    if secret:
        return await asyncio.to_thread(getpass.getpass, prompt)
    return (await asyncio.to_thread(input, prompt)).strip()


async def _confirm(prompt: str, default: bool = False) -> bool:
    answer = (await _ask(f"{prompt} [{'Y/n' if default else 'y/N'}] ")).lower()
    if not answer:
        return default
    return answer.startswith("y")


def _print_state(field: str, state: FieldValidationState) -> None:
    if state.status in (FieldStatus.VALID, FieldStatus.INVALID):
        suffix = f" {state.message}" if state.message else ""
        print(f"    {_STATUS_MARK[state.status]} {field}{suffix}")


def _print_result(result: StepResult) -> None:
    if result.message:
        print(f"  ! {result.message}")
    for field, message in result.field_errors.items():
        print(f"  ! {field}: {message}")


async def _fill_account(step: AccountStep, keystrokes: bool, typing_delay: float) -> None:
    store = step.form.store
    if step.registered is not None:
        print("  Account already created; keep the values to continue without registering again.")
    for descriptor in step.fields:
        current = store.value(descriptor.name)
        secret = descriptor.kind is FieldKind.PASSWORD
        hint = "" if secret or not current else f" [{current}]"
        value = await _ask(f"  {descriptor.label}{hint}: ", secret=secret)
        if not value and current:
            value = current

        if keystrokes and value:
            for i in range(1, len(value) + 1):
                step.change(descriptor.name, value[:i])
                await asyncio.sleep(typing_delay)
        else:
            step.change(descriptor.name, value)

    await step.form.wait_idle()
    print("  Field status:")
    for name, state in store.states().items():
        print(f"    [{_STATUS_MARK[state.status]}] {store.fields[name].label}" + (f": {state.message}" if state.message else ""))


async def _fill_roles(step: RoleStep) -> None:
    step.set_author_intent(await _confirm("  Request the author role?", default=step.author_intent))
    wants_admin = await _confirm("  Register as administrator?", default=step.admin_verified)
    if not wants_admin:
        step.set_admin(False)
        return
    if step.admin_verified:
        return

    step.set_admin(True)
    while step.admin_dialog_open:
        password = await _ask("  Admin password (empty to cancel): ", secret=True)
        if not password:
            step.cancel_admin()
            print("  Admin verification cancelled.")
            return
        result = await step.verify_admin(password)
        if result.outcome is StepOutcome.ACCEPTED:
            print("  Admin verified.")
        else:
            _print_result(result)


async def _fill_topics(step: TopicsStep) -> None:
    await step.load()
    if step.load_error:
        print(f"  ! {step.load_error} (continue to retry)")
        return
    if not step.topics:
        print("  No topics available.")
        return

    for i, topic in enumerate(step.topics, 1):
        mark = "x" if topic.code in step.selected else " "
        print(f"    {i:>2}. [{mark}] {topic.code:<8} {topic.name}")
    raw = await _ask("  Toggle topics (numbers or codes, comma separated): ")
    for token in filter(None, (t.strip() for t in raw.split(","))):
        if token.isdigit() and 1 <= int(token) <= len(step.topics):
            token = step.topics[int(token) - 1].code
        step.toggle(token)
    print(f"  Selected: {', '.join(sorted(step.selected)) or '(none)'}")


async def _choose_action(wizard: SignupWizard) -> str:
    options = ["[c]ontinue"]
    if wizard.current_step > 1:
        options.append("[b]ack")
    if wizard.current is not None and wizard.current.skippable:
        options.append("[s]kip")
    options.append("[q]uit")
    while True:
        choice = (await _ask(f"  {' / '.join(options)}: ")).lower()[:1] or "c"
        if choice in "cbsq":
            return choice


async def run(wizard: SignupWizard, keystrokes: bool = False, typing_delay: float = 0.05) -> int:
    subscribed = False
    try:
        while not wizard.completing:
            step = wizard.current
            print(f"\nStep {wizard.current_step}/{len(wizard.steps)}: {step.title} ({wizard.progress:.0f}%)")

            if isinstance(step, AccountStep):
                if keystrokes and not subscribed:
                    step.form.store.subscribe(_print_state)
                    subscribed = True
                await _fill_account(step, keystrokes, typing_delay)
            elif isinstance(step, RoleStep):
                await _fill_roles(step)
            elif isinstance(step, TopicsStep):
                await _fill_topics(step)

            choice = await _choose_action(wizard)
            if choice == "q":
                return 1
            if choice in "bs":
                try:
                    if choice == "b":
                        wizard.back()
                    else:
                        wizard.skip()
                except WizardTransitionError as e:
                    print(f"  ! {e}")
                continue

            result = await wizard.next()
            if result.outcome is not StepOutcome.ACCEPTED:
                _print_result(result)

        print("\nSetting up your account...")
        await wizard.wait_complete()
        return 0
    finally:
        wizard.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sign up for aiRchive from the terminal.")
    parser.add_argument("--base-url", default=None, help="Backend API base URL (default: AIRCHIVE_API_BASE_URL).")
    parser.add_argument("--per-field", action="store_true", help="Use the per-field validation endpoints.")
    parser.add_argument("--keystrokes", action="store_true", help="Feed each value one character at a time.")
    parser.add_argument("--typing-delay", type=float, default=0.05, help="Seconds between simulated keystrokes.")
    parser.add_argument("--log-level", default=None, help="Override AIRCHIVE_LOG_LEVEL.")
    args = parser.parse_args(argv)

    api_update = {}
    if args.base_url:
        api_update["base_url"] = args.base_url.rstrip("/")
    if args.per_field:
        api_update["validation_mode"] = "per_field"
    update = {"api": settings.api.model_copy(update=api_update)}
    if args.log_level:
        update["log_level"] = args.log_level.upper()
    cfg = settings.model_copy(update=update)

    setup_logging(cfg)

    def _on_complete(form_data: dict) -> None:
        summary = {k: v for k, v in form_data.items() if "password" not in k.lower()}
        print("Signup complete:")
        print(json.dumps(summary, indent=2, ensure_ascii=False))

    wizard = create_signup_wizard(cfg=cfg, on_complete=_on_complete)
    try:
        return asyncio.run(run(wizard, keystrokes=args.keystrokes, typing_delay=max(0.0, args.typing_delay)))
    except KeyboardInterrupt:
        logger.info("Signup aborted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
