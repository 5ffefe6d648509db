# Overview: Pytest coverage for the Flask CLI command groups.

import json

from gesti.extensions import db
from gesti.models import Product, User


def test_users_create(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        'users', 'create', '--name', 'Tienda CLI', '--email', 'cli@tienda.test', '--password', 'Password123',
    ])
    assert result.exit_code == 0, result.output
    assert 'PASS Created user' in result.output
    assert db.session.query(User).filter_by(email='cli@tienda.test').count() == 1


def test_users_create_rejects_weak_password(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        'users', 'create', '--name', 'X', '--email', 'weak@tienda.test', '--password', 'short',
    ])
    assert result.exit_code != 0


def test_seed_demo_then_export_and_import(app, user_a, tmp_path):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['data', 'seed-demo', '--email', user_a.email, '--yes'])
    assert result.exit_code == 0, result.output

    backup = tmp_path / 'backup.json'
    result = runner.invoke(args=['data', 'export', '--email', user_a.email, '--output', str(backup)])
    assert result.exit_code == 0, result.output
    data = json.loads(backup.read_text(encoding='utf-8'))
    assert len(data['products']) == 5

    data['products'] = data['products'][:1]
    data['transactions'] = []
    data['stockInEntries'] = []
    backup.write_text(json.dumps(data), encoding='utf-8')

    result = runner.invoke(args=['data', 'import', '--email', user_a.email, '--input', str(backup), '--yes'])
    assert result.exit_code == 0, result.output
    assert db.session.query(Product).filter_by(user_id=user_a.id).count() == 1


def test_unknown_account(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['data', 'seed-demo', '--email', 'nobody@tienda.test', '--yes'])
    assert result.exit_code != 0
    assert 'No account' in result.output
