"""
Hash any password stored as plain text (e.g. written through a raw SQL import).
Applies to active users and pending registrations.
Usage: python manage.py rehash_plain_passwords [--dry-run]
"""
from django.core.management.base import BaseCommand

from accounts.credentials import hash_password, is_hashed
from accounts.models import PendingUser, User


class Command(BaseCommand):
    help = 'Re-hash users and pending users whose password is stored as plain text'

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help='Only report, do not write')

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        fixed = 0
        for model in (User, PendingUser):
            for record in model.objects.all().only('pk', 'email', 'password'):
                pw = record.password
                # Unusable passwords ("!...") are intentional, not plain text.
                if not pw or pw.startswith('!') or is_hashed(pw):
                    continue
                if dry_run:
                    self.stdout.write(f'Would fix {model.__name__}: {record.email}')
                    fixed += 1
                    continue
                try:
                    record.set_credential(hash_password(pw))
                    record.save(update_fields=['password'])
                    fixed += 1
                    self.stdout.write(self.style.SUCCESS(f'Fixed {model.__name__}: {record.email}'))
                except Exception as e:
                    self.stdout.write(self.style.ERROR(f'Failed {record.email}: {e}'))
        self.stdout.write(self.style.SUCCESS(f'Done. Fixed {fixed} record(s).'))
