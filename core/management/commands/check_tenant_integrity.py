"""
Tenant integrity report.
- organizations left without an admin
- assignments whose organization differs from their task's or person's
- pending users whose referring admin lost the admin role or moved organization
Usage: python manage.py check_tenant_integrity [--apply]
Without --apply: dry-run only (report, no changes). --apply realigns
assignment organizations with their task.
"""
from django.core.management.base import BaseCommand
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q

from accounts.models import PendingUser, Role
from assignments.models import Assignment
from core.models import Organization


class Command(BaseCommand):
    help = 'Report tenant integrity issues; --apply fixes assignment organization drift'

    def add_arguments(self, parser):
        parser.add_argument(
            '--apply',
            action='store_true',
            help='Apply fixes (default: dry-run only)',
        )

    def handle(self, *args, **options):
        apply = options['apply']
        if not apply:
            self.stdout.write(self.style.WARNING('DRY RUN - no changes will be made. Use --apply to fix.'))
        issues = 0

        # 1) Organizations without an admin
        orphaned = Organization.objects.annotate(
            admin_count=Count('users', filter=Q(users__role=Role.ADMIN)),
        ).filter(admin_count=0)
        for org in orphaned:
            issues += 1
            self.stdout.write(f'  Organization without admin: {org.name} ({org.pk})')

        # 2) Assignment organization mismatch with task or person
        mismatched = Assignment.objects.exclude(
            organization_id=F('task__organization_id'),
        ) | Assignment.objects.exclude(organization_id=F('person__organization_id'))
        mismatched = list(mismatched.select_related('task', 'person').distinct())
        if mismatched:
            issues += len(mismatched)
            self.stdout.write(f'  Assignments with org mismatch: {len(mismatched)}')
            for a in mismatched[:5]:
                self.stdout.write(
                    f'    Assignment id={a.pk}: org={a.organization_id}, '
                    f'task_org={a.task.organization_id}, person_org={a.person.organization_id}'
                )
            if len(mismatched) > 5:
                self.stdout.write(f'    ... and {len(mismatched) - 5} more')
            if apply:
                updated, skipped = 0, []
                for a in mismatched:
                    if a.organization_id != a.task.organization_id:
                        a.organization_id = a.task.organization_id
                        try:
                            with transaction.atomic():
                                a.save(update_fields=['organization'])
                        except IntegrityError:
                            # Task's organization already has this task/person pair.
                            skipped.append(a.pk)
                            continue
                        updated += 1
                self.stdout.write(self.style.SUCCESS(f'    Fixed {updated} assignments'))
                if skipped:
                    self.stdout.write(self.style.WARNING(
                        f'    Skipped {len(skipped)} duplicate assignments (ids: {", ".join(map(str, skipped))})'
                    ))
            else:
                self.stdout.write('    Would realign assignments with their task organization')

        # 3) Pending users whose referrer is no longer an admin of the same organization
        stale_pending = PendingUser.objects.exclude(
            referring_admin__role=Role.ADMIN,
            referring_admin__organization_id=F('organization_id'),
        )
        stale_count = stale_pending.count()
        if stale_count:
            issues += stale_count
            self.stdout.write(f'  Pending users with an ineligible referring admin: {stale_count}')

        if issues:
            self.stdout.write(self.style.WARNING(f'{issues} issue(s) found.'))
        else:
            self.stdout.write('No integrity issues found.')
