from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.exchange.domain.exceptions import ExchangeError
from apps.exchange.domain.services import build_currency_service


class Command(BaseCommand):
    help = 'Fetch latest exchange rates, or historical rates for a date range'

    def add_arguments(self, parser):
        parser.add_argument(
            '--base',
            dest='base_currency',
            type=str,
            default='EUR',
            help='Base currency code (default EUR)'
        )
        parser.add_argument(
            '--from',
            dest='date_from',
            type=str,
            help='Start date in YYYY-MM-DD format (historical mode)'
        )
        parser.add_argument(
            '--to',
            dest='date_to',
            type=str,
            help='End date in YYYY-MM-DD format (historical mode)'
        )
        parser.add_argument('--page', type=int, default=1, help='Page number (historical mode)')
        parser.add_argument('--page-size', dest='page_size', type=int, default=10, help='Rates per page')

    def handle(self, **options):
        base_currency = options['base_currency'].upper()
        date_from_str = options['date_from']
        date_to_str = options['date_to']
        service = build_currency_service()

        try:
            if date_from_str or date_to_str:
                rates = service.get_historical_rates(
                    base_currency,
                    *self._parse_range(date_from_str, date_to_str),
                    page=self._positive(options['page'], 'page'),
                    page_size=self._positive(options['page_size'], 'page-size'),
                )
            else:
                rates = service.get_latest_rates(base_currency)
        except ExchangeError as e:
            raise CommandError(str(e)) from e

        if not rates:
            self.stdout.write(self.style.WARNING(f'No rates found for {base_currency}'))
            return

        for rate in rates:
            self.stdout.write(f'{rate.date:%Y-%m-%d} {rate.base_currency}/{rate.target_currency} {rate.rate}')

        self.stdout.write(self.style.SUCCESS(f'Fetched {len(rates)} rates for {base_currency}'))

    @staticmethod
    def _parse_range(date_from_str, date_to_str):
        if not (date_from_str and date_to_str):
            raise CommandError('Both --from and --to are required for historical rates')

        try:
            date_from = date.fromisoformat(date_from_str)
            date_to = date.fromisoformat(date_to_str)
        except ValueError:
            raise CommandError('Invalid date format. Use YYYY-MM-DD')

        if date_from > date_to:
            raise CommandError('date_from must be before or equal to date_to')

        return date_from, date_to

    @staticmethod
    def _positive(value, name):
        if value < 1:
            raise CommandError(f'--{name} must be greater than zero')
        return value
