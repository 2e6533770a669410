"""CLI script to bootstrap the first super admin account.
Usage: python scripts/create_super_admin.py --email EMAIL --name NAME [--password PASSWORD]
"""
import sys
import argparse
import getpass
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `venturehub` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from venturehub import models, repositories
from venturehub.database import engine, create_db_and_tables
from venturehub.errors import ServiceError
from venturehub.services.auth import _check_password_strength, hash_password, normalize_email


def main(email: str, name: str, password: str, phone: Optional[str] = None, location: Optional[str] = None) -> int:
    """Create (or upgrade) an account with a `super` admin row.

    An existing non-admin account with the same email is switched to the
    admin type and keeps its password. Results are printed to stdout.
    """
    create_db_and_tables()
    email = normalize_email(email)
    with Session(engine) as session:
        accounts = repositories.AccountRepository(session)
        admins = repositories.AdminRepository(session)
        if admins.get_by_email(email):
            print(f'Admin {email} already exists')
            return 1
        account = accounts.get_by_email(email)
        if account is None:
            try:
                _check_password_strength(password)
            except ServiceError as e:
                print(f'Password rejected: {e.message}')
                return 2
            account = accounts.create(models.Account(
                email=email,
                password_hash=hash_password(password),
                name=name,
                account_type='admin',
                email_confirmed_at=models.utcnow(),
            ))
        else:
            account.account_type = 'admin'
            account.email_confirmed_at = account.email_confirmed_at or models.utcnow()
            accounts.save(account)
        admins.create(models.Admin(
            id=account.id,
            email=email,
            name=name,
            admin_level='super',
            phone_number=phone,
            location=location,
        ))
        print(f'Created super admin {email} (id {account.id})')
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--email', required=True, help='Login email of the super admin')
    parser.add_argument('--name', required=True, help='Display name')
    parser.add_argument('--password', help='Password; prompted for when omitted')
    parser.add_argument('--phone', help='Optional phone number')
    parser.add_argument('--location', help='Optional location')
    args = parser.parse_args()
    pw = args.password or getpass.getpass('Password: ')
    sys.exit(main(args.email, args.name, pw, phone=args.phone, location=args.location))
