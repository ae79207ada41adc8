from werkzeug.security import check_password_hash

from admin_user_manager import create_user, import_staff, list_users, reset_password
from models import ADMIN_ROLE, User


def test_create_user(app):
    user = create_user('P00166224', 'RJ Ramautar', 'S3cure!pass', ADMIN_ROLE, 'rj@example.org')

    assert user is not None
    stored = User.query.filter_by(p_number='P00166224').one()
    assert stored.role == ADMIN_ROLE
    assert check_password_hash(stored.password_hash, 'S3cure!pass')


def test_create_user_rejects_duplicates_and_unknown_roles(app):
    assert create_user('P1', 'One', 'pw') is not None
    assert create_user('P1', 'One Again', 'pw') is None
    assert create_user('P2', 'Two', 'pw', role='superuser') is None
    assert User.query.count() == 1


def test_reset_password(app):
    create_user('P1', 'One', 'old-password')
    assert reset_password('P1', 'new-password') is True
    assert check_password_hash(User.query.filter_by(p_number='P1').one().password_hash, 'new-password')
    assert reset_password('P404', 'whatever') is False


def test_import_staff(app, tmp_path):
    create_user('P003', 'Already Here', 'pw')
    path = tmp_path / 'staff.csv'
    path.write_text(
        'P Number,Name,Email\n'
        'P001,Test Staff One,one@example.org\n'
        'P002,Test Staff Two\n'
        'P003,Test Staff Three\n',
        encoding='utf-8',
    )

    created, skipped = import_staff(str(path), 'ChangeMe123!')

    assert (created, skipped) == (2, 1)
    one = User.query.filter_by(p_number='P001').one()
    assert one.email == 'one@example.org'
    assert one.role == 'staff'
    assert check_password_hash(one.password_hash, 'ChangeMe123!')
    assert [u.p_number for u in list_users()] == ['P003', 'P001', 'P002']
