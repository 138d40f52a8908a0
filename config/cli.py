#!/usr/bin/env python3
"""
Configuration Management CLI Tool

Usage:
    python -m config.cli show          # Show current configuration
    python -m config.cli show --json   # JSON format output
    python -m config.cli validate      # Validate configuration
    python -m config.cli env           # Generate environment variable template
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from urllib.parse import urlparse


def cmd_show(args):
    """Show current configuration"""
    from config.settings import settings

    if args.json:
        data = settings.model_dump(mode="json")

        # Convert Path to string
        def convert_paths(obj):
            if isinstance(obj, dict):
                return {k: convert_paths(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_paths(v) for v in obj]
            elif isinstance(obj, Path):
                return str(obj)
            return obj

        data = convert_paths(data)
        print(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        print("=" * 60)
        print("aiRchive Signup Configuration")
        print("=" * 60)

        print("\n🌐 Backend API:")
        print(f"  base_url:         {settings.api.base_url}")
        print(f"  timeout:          {settings.api.timeout}s")
        print(f"  connect_timeout:  {settings.api.connect_timeout}s")
        print(f"  validation_mode:  {settings.api.validation_mode}")
        print(f"  trust_env:        {settings.api.trust_env}")

        print("\n✅ Field Validation:")
        print(f"  debounce_ms:      {settings.validation.debounce_ms}")
        print(f"  timeout:          {settings.validation.timeout}s")

        print("\n🧭 Wizard:")
        print(f"  completion_delay: {settings.wizard.completion_delay}s")

        print("\n📋 Log Configuration:")
        print(f"  log_level:    {settings.log_level}")
        print(f"  log_format:   {settings.log_format}")
        print(f"  log_file:     {settings.log_file or '(stdout only)'}")

        print("\n" + "=" * 60)


def cmd_validate(args):
    """Validate configuration"""
    from config.settings import settings

    errors = []
    warnings = []

    parsed = urlparse(settings.api.base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        errors.append(f"API base URL is not an absolute http(s) URL: {settings.api.base_url!r}")
    elif parsed.scheme == "http" and parsed.hostname not in ("localhost", "127.0.0.1"):
        warnings.append("API base URL uses plain http; session cookies will travel unencrypted")

    if settings.validation.timeout <= 0:
        errors.append("Validation timeout must be positive, otherwise fields can hang in 'validating'")
    elif settings.validation.timeout > settings.api.timeout:
        warnings.append("Validation timeout exceeds the HTTP timeout; the HTTP timeout fires first")

    if settings.validation.debounce_ms < 0:
        errors.append("Debounce delay must not be negative")
    elif settings.validation.debounce_ms == 0:
        warnings.append("Debounce disabled: every keystroke triggers a backend call")

    if settings.wizard.completion_delay < 0:
        errors.append("Wizard completion delay must not be negative")

    if errors:
        print("❌ Configuration validation failed:")
        for e in errors:
            print(f"  - {e}")
        print()

    if warnings:
        print("⚠️  Configuration warnings:")
        for w in warnings:
            print(f"  - {w}")
        print()

    if not errors and not warnings:
        print("✅ Configuration validation passed")
    elif not errors:
        print("✅ Configuration validation passed (with warnings)")

    return 1 if errors else 0


def cmd_env(args):
    """Generate environment variable template"""
    from config.settings import settings

    print("# Environment variable representation of current configuration")
    print("# Can be copied to .env file")
    print()

    print(f"AIRCHIVE_LOG_LEVEL={settings.log_level}")
    print(f"AIRCHIVE_LOG_FORMAT={settings.log_format}")
    if settings.log_file:
        print(f"AIRCHIVE_LOG_FILE={settings.log_file}")
    print()

    print(f"AIRCHIVE_API_BASE_URL={settings.api.base_url}")
    print(f"AIRCHIVE_API_TIMEOUT={settings.api.timeout}")
    print(f"AIRCHIVE_API_CONNECT_TIMEOUT={settings.api.connect_timeout}")
    print(f"AIRCHIVE_API_VALIDATION_MODE={settings.api.validation_mode}")
    print(f"AIRCHIVE_API_TRUST_ENV={str(settings.api.trust_env).lower()}")
    print()

    print(f"AIRCHIVE_VALIDATION_DEBOUNCE_MS={settings.validation.debounce_ms}")
    print(f"AIRCHIVE_VALIDATION_TIMEOUT={settings.validation.timeout}")
    print()

    print(f"AIRCHIVE_WIZARD_COMPLETION_DELAY={settings.wizard.completion_delay}")


def main():
    parser = argparse.ArgumentParser(
        description="aiRchive Signup Configuration Management Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m config.cli show          Show current configuration
  python -m config.cli show --json   JSON format output
  python -m config.cli validate      Validate configuration
  python -m config.cli env           Generate environment variables
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    # show command
    show_parser = subparsers.add_parser("show", help="Show current configuration")
    show_parser.add_argument("--json", action="store_true", help="JSON format output")

    # validate command
    subparsers.add_parser("validate", help="Validate configuration")

    # env command
    subparsers.add_parser("env", help="Generate environment variable template")

    args = parser.parse_args()

    if args.command == "show":
        cmd_show(args)
    elif args.command == "validate":
        sys.exit(cmd_validate(args))
    elif args.command == "env":
        cmd_env(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
