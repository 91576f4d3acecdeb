#!/usr/bin/env python3
"""
Partner DB Terminal CLI
Operator commands: schema setup, the HTTP server, and direct access to the stores.
"""

import logging
import click

from partnerdb.engine import contacts as contact_store
from partnerdb.engine import settings as settings_store
from partnerdb.engine import rename as rename_propagator
from partnerdb.engine import labor_claims as claim_store
from partnerdb.engine import auth as auth_gate
from partnerdb.errors import PartnerDBError
from partnerdb.models import CategoryType, VocabularyType
from partnerdb.logging_config import configure_logging, log_call

CATEGORY_CHOICES = [c.value for c in CategoryType]
VOCABULARY_CHOICES = [v.value for v in VocabularyType]


def _fail(message: str):
    logging.getLogger("partnerdb").warning(f"cli | {message}")
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


@click.group()
def cli():
    """Partner DB - Business Directory & Records"""
    configure_logging()


# =============================================================================
# DATABASE / SERVER
# =============================================================================

@cli.group()
def db():
    """Database setup"""
    pass


@db.command('init')
@click.option('--no-seed', is_flag=True, help='Skip inserting the default vocabularies')
@log_call
def db_init(no_seed):
    """Create tables and seed the default vocabularies"""
    from partnerdb.db.schema import init_schema

    try:
        statements = init_schema()
        click.echo(f"✓ Schema ready ({statements} statements)")
        if not no_seed:
            inserted = settings_store.seed_defaults()
            click.echo(f"✓ Seeded {inserted} default vocabulary values")
    except PartnerDBError as e:
        _fail(e.message)


@cli.command('serve')
@click.option('--host', default=None, help='Bind address (default: API_HOST)')
@click.option('--port', default=None, type=int, help='Port (default: API_PORT)')
@click.option('--reload', is_flag=True, help='Reload on code changes (development)')
def serve(host, port, reload):
    """Run the HTTP API"""
    import uvicorn
    from partnerdb.config import config

    host = host or config.API_HOST
    port = port or config.API_PORT
    logging.getLogger("partnerdb").info(f"serve | {host}:{port}")
    click.echo(f"Serving Partner DB API on http://{host}:{port}")
    uvicorn.run("partnerdb.api.main:app", host=host, port=port, reload=reload)


# =============================================================================
# CONTACTS COMMANDS
# =============================================================================

@cli.group()
def contacts():
    """Browse and remove contacts"""
    pass


@contacts.command('list')
@click.option('--category', type=click.Choice(CATEGORY_CHOICES, case_sensitive=False),
              help='Only one category partition')
@log_call
def contacts_list(category):
    """List contacts, newest first"""
    try:
        results = contact_store.list_contacts(CategoryType(category.upper()) if category else None)
    except PartnerDBError as e:
        _fail(e.message)

    if not results:
        click.echo("No contacts found.")
        return

    click.echo(f"\nFound {len(results)} contacts:\n")
    click.echo(f"{'ID':<34} {'Name':<24} {'Category':<14} {'Industry':<12} {'Staff':>5}")
    click.echo("-" * 92)

    for c in results:
        name = c.brand_name or (c.staff_list[0].name if c.staff_list else '')
        click.echo(
            f"{c.id[:32]:<34} {name[:22]:<24} "
            f"{c.category.value:<14} {(c.industry or c.sub_category or '')[:10]:<12} "
            f"{len(c.staff_list):>5}"
        )


@contacts.command('show')
@click.argument('contact_id')
@log_call
def contacts_show(contact_id):
    """Show full contact details"""
    try:
        contact = contact_store.get_contact(contact_id)
    except PartnerDBError as e:
        _fail(e.message)

    click.echo(f"\n{'='*80}")
    click.echo(f"CONTACT {contact.id}: {contact.brand_name or '(no name)'}")
    click.echo(f"{'='*80}")
    click.echo(f"Category:    {contact.category.label} ({contact.category.value})")
    click.echo(f"Industry:    {contact.industry or '(not set)'}")
    click.echo(f"Subcategory: {contact.sub_category or '(not set)'}")
    click.echo(f"Address:     {contact.address or '(not set)'}")
    click.echo(f"Phone:       {contact.phone or '(not set)'}")
    click.echo(f"Phone 2:     {contact.phone2 or '(not set)'}")
    click.echo(f"Email:       {contact.email or '(not set)'}")
    click.echo(f"Homepage:    {contact.homepage or '(not set)'}")
    click.echo(f"Created:     {contact.created_at}")
    click.echo(f"Updated:     {contact.updated_at}")

    if contact.memo:
        click.echo(f"\nMemo:\n{contact.memo}")

    click.echo(f"\n{'='*80}")
    click.echo("STAFF")
    click.echo(f"{'='*80}")

    if contact.staff_list:
        for s in contact.staff_list:
            click.echo(f"\n{s.name}  [{s.department or '-'}] {s.position or ''}".rstrip())
            if s.phone:
                click.echo(f"  Phone: {s.phone}")
            if s.email:
                click.echo(f"  Email: {s.email}")
    else:
        click.echo("No staff registered.")

    click.echo()


@contacts.command('delete')
@click.argument('contact_id')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@log_call
def contacts_delete(contact_id, yes):
    """Delete a contact and its staff (irreversible)"""
    if not yes:
        click.confirm(f"Delete contact {contact_id} permanently?", abort=True)
    removed = contact_store.delete_contact(contact_id)
    if removed:
        click.echo(f"✓ Deleted contact {contact_id}")
    else:
        click.echo(f"Contact {contact_id} did not exist, nothing to delete.")


# =============================================================================
# SETTINGS COMMANDS
# =============================================================================

@cli.group()
def settings():
    """Manage departments, industries and outsource types"""
    pass


@settings.command('list')
@click.argument('vocabulary', type=click.Choice(VOCABULARY_CHOICES))
@log_call
def settings_list(vocabulary):
    """List the values of a vocabulary"""
    values = settings_store.list_values(VocabularyType(vocabulary))
    if not values:
        click.echo(f"No {vocabulary} values.")
        return
    for position, value in enumerate(values, start=1):
        click.echo(f"{position:>3}. {value}")


@settings.command('add')
@click.argument('vocabulary', type=click.Choice(VOCABULARY_CHOICES))
@click.argument('value')
@log_call
def settings_add(vocabulary, value):
    """Add a value to a vocabulary"""
    try:
        values = settings_store.add_value(VocabularyType(vocabulary), value)
    except PartnerDBError as e:
        _fail(e.message)
    click.echo(f"✓ Added {value!r} ({len(values)} {vocabulary} values)")


@settings.command('rename')
@click.argument('vocabulary', type=click.Choice(VOCABULARY_CHOICES))
@click.argument('old_value')
@click.argument('new_value')
@log_call
def settings_rename(vocabulary, old_value, new_value):
    """Rename a value everywhere it is used"""
    try:
        affected = rename_propagator.rename_value(VocabularyType(vocabulary), old_value, new_value)
    except PartnerDBError as e:
        _fail(e.message)
    click.echo(f"✓ Renamed {old_value!r} → {new_value!r} ({affected} records updated)")


# =============================================================================
# LABOR CLAIMS
# =============================================================================

@cli.command('claims')
@click.option('--worker', 'worker_id', help='Only one worker (staff id)')
@log_call
def claims(worker_id):
    """List labor claims with totals"""
    results = claim_store.list_claims(worker_id)
    if not results:
        click.echo("No labor claims found.")
        return

    click.echo(f"{'Date':<12} {'Worker':<16} {'Status':<10} {'Amount':>12}")
    click.echo("-" * 54)
    for c in results:
        click.echo(f"{(c.date or ''):<12} {(c.worker_name or '')[:14]:<16} {c.status:<10} {c.total_amount:>12,.0f}")

    totals = claim_store.summarize(results)
    click.echo("-" * 54)
    click.echo(f"Total {totals['total']:,.0f} | Pending {totals['pending']:,.0f} | Paid {totals['paid']:,.0f}")


# =============================================================================
# USERS
# =============================================================================

@cli.group()
def users():
    """Manage sign-in accounts"""
    pass


@users.command('list')
@log_call
def users_list():
    """List accounts"""
    accounts = auth_gate.list_users()
    if not accounts:
        click.echo("No users. Create one with: partnerdb users add")
        return
    for u in accounts:
        click.echo(f"{u.id:<34} {u.username:<20} {u.name}")


@users.command('add')
@click.option('--id', 'user_id', default=None, help='Account id (default: generated)')
@click.option('--name', prompt='Display name')
@click.option('--username', prompt='Username')
@click.password_option()
@log_call
def users_add(user_id, name, username, password):
    """Create an account (password is stored hashed)"""
    try:
        user = auth_gate.add_user(name, username, password, user_id=user_id)
    except PartnerDBError as e:
        _fail(e.message)
    click.echo(f"✓ Created user {user.username} ({user.id})")


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    cli()
