"""Print a development session token for a user id."""

from __future__ import annotations

import argparse

from dotenv import load_dotenv

from ofertas.utils.tokens import generate_session_token


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id", nargs="?", default="demo-user")
    args = parser.parse_args()
    load_dotenv()
    print(generate_session_token(args.user_id))


if __name__ == "__main__":
    main()
