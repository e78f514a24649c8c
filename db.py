from models import db, Account
from services import build_services
from store import RecordStore

DEMO_ACCOUNTS = [
    ('Bet365', 500.0),
    ('Betano', 300.0),
    ('Sportingbet', 200.0),
]

def init_db(app):
    """Initialize the database"""
    with app.app_context():
        db.create_all()

def reset_db(app):
    """Drop every table and recreate the schema"""
    with app.app_context():
        db.drop_all()
        db.create_all()

def seed_db(app):
    """Seed the database with demo betting houses"""
    with app.app_context():
        # Check if accounts already exist
        if db.session.query(Account).count() > 0:
            app.logger.info("Database already seeded")
            return

        services = build_services(RecordStore(db.session))
        for name, balance in DEMO_ACCOUNTS:
            services.accounts.create(name, balance)

        app.logger.info("Database seeded with %d betting houses", len(DEMO_ACCOUNTS))

if __name__ == '__main__':
    from app import create_app
    app = create_app()
    init_db(app)
    seed_db(app)
