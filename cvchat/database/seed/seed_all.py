from flask.cli import with_appcontext
from cvchat.database.seed.seed_demo_profile import seed as seed_demo_profile
from cvchat.extensions import db

import click

@click.command("seed-all")
@with_appcontext
def seed_all():
    """Create missing tables and run all database seeders."""
    click.echo("🌱 Seeding database...")
    db.create_all()
    seed_demo_profile()
    click.echo("✅ All seeders completed!")
