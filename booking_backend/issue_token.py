"""Print a signed access token for local development.

Usage:
    python -m booking_backend.issue_token USER_ID [--role admin] [--franchise-id ID]
"""
import argparse
import sys

from booking_backend.auth.jwt_handler import create_access_token


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("user_id")
    parser.add_argument("--role", default="customer")
    parser.add_argument("--franchise-id", default=None)
    parser.add_argument("--expires-minutes", type=int, default=None)
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    if not args.user_id.strip():
        print("user_id must not be blank", file=sys.stderr)
        sys.exit(1)

    token = create_access_token(
        subject=args.user_id.strip(),
        role=args.role,
        franchise_id=args.franchise_id,
        expires_minutes=args.expires_minutes,
    )
    print(token)


if __name__ == "__main__":
    main()
