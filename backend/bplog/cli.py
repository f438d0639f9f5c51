"""
Flask CLI commands for maintaining the reading log.
"""
import click

from bplog.storage import get_store
from bplog.utils.audit_logger import audit_log
from bplog.utils.csv_codec import CsvFormatError, import_readings, to_csv


def register_commands(app):

    @app.cli.command('init-db')
    def init_db():
        """Create the database tables."""
        from bplog import db
        from bplog.models import reading  # noqa: F401
        db.create_all()
        click.echo('Database tables created.')

    @app.cli.command('export-csv')
    @click.argument('path', required=False, type=click.Path(dir_okay=False, writable=True))
    def export_csv(path):
        """Write every reading as CSV to PATH (stdout when omitted)."""
        readings = get_store().get_all()
        csv_text = to_csv(readings, app.config['TZ'])
        if path:
            with open(path, 'w', encoding='utf-8', newline='') as f:
                f.write(csv_text)
            click.echo(f'Exported {len(readings)} reading(s) to {path}.')
        else:
            click.echo(csv_text, nl=False)
        audit_log('EXPORT', 'readings', details={'format': 'csv', 'count': len(readings)})

    @app.cli.command('import-csv')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def import_csv(path):
        """Import readings from a CSV file."""
        with open(path, encoding='utf-8-sig') as f:
            text = f.read()
        try:
            result = import_readings(get_store(), text)
        except CsvFormatError as e:
            raise click.ClickException(str(e))
        audit_log('IMPORT', 'readings', details={'format': 'csv', **result.to_dict()})
        click.echo(f'Imported {result.imported} reading(s); '
                   f'skipped {result.skipped} unparsable row(s), '
                   f'rejected {result.rejected} invalid row(s).')

    @app.cli.command('clear-readings')
    @click.option('--yes', is_flag=True, help='Confirm deleting every reading.')
    def clear_readings(yes):
        """Delete all readings."""
        if not yes:
            raise click.ClickException('Refusing to delete all readings without --yes')
        count = get_store().delete_all()
        audit_log('DELETE', 'readings', details={'action': 'delete_all', 'count': count})
        click.echo(f'Removed {count} reading(s).')
