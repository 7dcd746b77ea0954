# backend/salescast/manage.py
"""
Out-of-band account administration.

Roles and manager edges are never set through the web app. Use this to
bootstrap the first Admin and to wire up reporting lines:

    salescast-admin whitelist boss@company.com
    # boss signs in once with Google, then
    salescast-admin set-role boss@company.com Admin
    salescast-admin set-manager rep@company.com boss@company.com
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salescast.core.database import SessionLocal, init_db
from salescast.core.permissions import Role
from salescast.models.user import User
from salescast.models.whitelist import WhitelistEntry
from salescast.services.accounts import normalize_email

app = typer.Typer(add_completion=False, help="SalesCast account administration.")
console = Console()


def _user_by_email(db: Session, email: str) -> User:
    email = normalize_email(email)
    user = db.query(User).filter(User.email == email).first()
    if not user:
        console.print(f"[red]No user with email {email}. They must sign in once first.[/red]")
        raise typer.Exit(code=1)
    return user


@app.command("init-db")
def init_db_cmd():
    """Create missing tables (dev; use alembic in production)."""
    init_db()
    console.print("✅ Tables ready")


@app.command()
def whitelist(email: str = typer.Argument(..., help="Email allowed to sign up.")):
    email = normalize_email(email)
    db = SessionLocal()
    try:
        db.add(WhitelistEntry(email=email))
        db.commit()
        console.print(f"✅ Whitelisted: {email}")
    except IntegrityError:
        db.rollback()
        console.print(f"♻️ Already whitelisted: {email}")
    finally:
        db.close()


@app.command("set-role")
def set_role(
    email: str = typer.Argument(...),
    role: Role = typer.Argument(..., case_sensitive=False),
):
    db = SessionLocal()
    try:
        user = _user_by_email(db, email)
        user.role = role.value
        db.commit()
        console.print(f"✅ {user.email} is now {role.value}")
    finally:
        db.close()


@app.command("set-manager")
def set_manager(
    email: str = typer.Argument(...),
    manager_email: Optional[str] = typer.Argument(None),
    clear: bool = typer.Option(False, "--clear", help="Remove the manager instead."),
):
    if not clear and not manager_email:
        console.print("[red]Give a manager email or --clear[/red]")
        raise typer.Exit(code=2)

    db = SessionLocal()
    try:
        user = _user_by_email(db, email)

        if clear:
            user.manager_id = None
            db.commit()
            console.print(f"✅ {user.email} has no manager")
            return

        manager = _user_by_email(db, manager_email)
        if manager.id == user.id:
            console.print("[red]A user cannot manage themselves[/red]")
            raise typer.Exit(code=2)

        # the manager edge must keep forming a forest
        cursor = manager
        while cursor is not None:
            if cursor.manager_id == user.id:
                console.print(f"[red]{manager.email} already reports to {user.email}[/red]")
                raise typer.Exit(code=2)
            cursor = cursor.manager

        user.manager_id = manager.id
        db.commit()
        console.print(f"✅ {user.email} now reports to {manager.email}")
    finally:
        db.close()


@app.command("list-users")
def list_users():
    db = SessionLocal()
    try:
        table = Table("id", "email", "name", "role", "manager")
        for u in db.query(User).order_by(User.id).all():
            table.add_row(
                str(u.id),
                u.email,
                u.display_name,
                u.role,
                u.manager.email if u.manager else "",
            )
        console.print(table)
    finally:
        db.close()


if __name__ == "__main__":
    app()
