"""Print a bcrypt hash for RECIPEBOX_ADMIN_PASSWORD_HASH."""

import getpass
import sys

from recipebox.core.modules.admin.passwords import hash_password
from recipebox.errors import ValidationError


def main() -> None:
    password = getpass.getpass("Enter the password you want to hash: ")
    if not password.strip():
        print("Password cannot be empty", file=sys.stderr)
        sys.exit(1)

    try:
        password_hash = hash_password(password)
    except ValidationError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    print("\nCopy this line into your .env file:\n")
    print(f"RECIPEBOX_ADMIN_PASSWORD_HASH={password_hash}")
    print("\nRemove any RECIPEBOX_ADMIN_PASSWORD line from .env afterwards.")


if __name__ == "__main__":
    main()
