import typer

app = typer.Typer()

DEFAULT_CATEGORIES = [
    ("Music", "Concerts, festivals and live performances"),
    ("Technology", "Conferences, meetups and workshops"),
    ("Sports", "Matches, races and tournaments"),
    ("Arts & Theater", "Exhibitions, plays and shows"),
    ("Business", "Networking, seminars and trade fairs"),
    ("Education", "Classes, courses and talks"),
]


@app.command()
def create_admin_user():
    from models import factory_session
    from models.User import UserRole
    from repository.user import create_user, get_user_by_username
    from core.security import generate_hash_password

    username = typer.prompt("username")
    email = typer.prompt("email")
    password = typer.prompt("password", hide_input=True, confirmation_prompt=True)

    with factory_session() as db:
        if get_user_by_username(db=db, username=username):
            typer.echo(f"User {username} already exists")
            raise typer.Exit(code=1)
        create_user(
            db=db,
            username=username,
            email=email,
            password=generate_hash_password(password),
            role=UserRole.ADMIN,
            is_active=True,
            is_commit=True,
        )
    typer.echo(f"Admin {username} created")


@app.command()
def seed_categories():
    from models import factory_session
    from repository.category import get_category_by_name, insert_category

    with factory_session() as db:
        for name, description in DEFAULT_CATEGORIES:
            if get_category_by_name(db=db, name=name):
                continue
            insert_category(db=db, name=name, description=description, is_commit=False)
            typer.echo(f"Category {name} added")
        db.commit()


@app.command()
def reset_event_sales(event_id: int):
    from core.errors import TicketingError
    from models import factory_session
    from repository.sales_admin import reset_sales

    typer.confirm(
        f"Reset tickets_sold and total_revenue of event {event_id}?", abort=True
    )
    with factory_session() as db:
        try:
            event = reset_sales(db=db, event_id=event_id)
        except TicketingError as e:
            typer.echo(e.message)
            raise typer.Exit(code=1)
    typer.echo(f"Sales of event {event.id} reset")


if __name__ == "__main__":
    app()
