# Create every table on the configured database (DATABASE_URL).
from barbershop.extensions import db
from barbershop.models import Base
from main import create_app

app = create_app()

with app.app_context():
    Base.metadata.create_all(bind=db.engine)

print("Database tables created successfully!")
