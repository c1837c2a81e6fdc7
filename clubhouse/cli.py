"""Clubhouse CLI tool (clubctl)."""

import typer

app = typer.Typer(name="clubctl", help="Clubhouse CLI")
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


@db_app.command("create")
def db_create():
    """Create all tables that don't exist yet."""
    from clubhouse.db.session import init_db
    from clubhouse.core.config import settings

    init_db()
    typer.echo(f"✅ Tables created on {settings.DATABASE_URL}")


@db_app.command("seed")
def db_seed(
    sample: bool = typer.Option(True, help="Also create the demo club"),
):
    """Seed the system admin and, optionally, sample data."""
    from clubhouse.db.session import SessionLocal, init_db
    from clubhouse.db.seeds.seed_admin import seed_admin
    from clubhouse.db.seeds.seed_sample_data import seed_sample_data

    init_db()
    db = SessionLocal()
    try:
        seed_admin(db)
        if sample:
            seed_sample_data(db)
    finally:
        db.close()
    typer.echo("✅ All seeds applied")


@db_app.command("reset")
def db_reset():
    """Drop and recreate every table (DANGER)."""
    confirm = typer.confirm("⚠️  This will DROP all tables. Continue?")
    if not confirm:
        raise typer.Abort()
    from clubhouse.db.base import Base
    from clubhouse.db.session import engine, init_db
    import clubhouse.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    init_db()
    typer.echo("✅ Database reset")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """Start the API server."""
    import uvicorn
    uvicorn.run("clubhouse.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
