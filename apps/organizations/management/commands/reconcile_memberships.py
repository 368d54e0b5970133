from django.core.management.base import BaseCommand

from apps.organizations.services import get_membership_manager


class Command(BaseCommand):
    help = 'Repairs users and organizations whose membership records disagree'

    def handle(self, *args, **options):
        report = get_membership_manager().reconcile_all()

        for repair in report.repairs:
            self.stdout.write(self.style.WARNING(f'Repaired {repair}'))

        self.stdout.write(self.style.SUCCESS(
            f'Checked {report.organizations_checked} organizations and '
            f'{report.users_checked} users: {len(report.repairs)} repairs'
        ))
