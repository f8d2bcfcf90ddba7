from sqlalchemy import create_engine, inspect

import main


def test_startup_creates_tables(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'startup.db'}")
    assert main.startup(engine, create_tables=True) is True
    assert {"users", "rooms", "room_memberships", "messages"} <= set(inspect(engine).get_table_names())
    main.shutdown(engine)


def test_startup_reports_unreachable_database(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'nested' / 'db.sqlite'}")
    assert main.startup(engine, create_tables=False) is False
