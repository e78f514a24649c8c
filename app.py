from flask import Flask, request, jsonify, g, current_app, Response
import csv
from io import StringIO
import os

# Import models and db
from models import db
from errors import LedgerError
from services import build_services
from services.bets import parse_status
from services.settings import DEFAULT_MONTHLY_GOAL
from store import RecordStore

def _database_url():
    # Handle both SQLite (local) and PostgreSQL (Render)
    database_url = os.environ.get('DATABASE_URL')
    if not database_url:
        # Local development with SQLite
        return 'sqlite:///bankroll_ledger.db'
    if database_url.startswith('postgres://'):
        return database_url.replace('postgres://', 'postgresql+psycopg://', 1)
    # Ensure we're using psycopg driver
    return database_url.replace('postgresql://', 'postgresql+psycopg://', 1)

def create_app(config=None):
    app = Flask(__name__)
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_url()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['MONTHLY_GOAL_DEFAULT'] = float(os.environ.get('MONTHLY_GOAL_DEFAULT', DEFAULT_MONTHLY_GOAL))
    app.config['SEED_DEMO_DATA'] = os.environ.get('SEED_DEMO_DATA', 'true').lower() in ('1', 'true', 'yes')
    if config:
        app.config.update(config)

    # Initialize db with app
    db.init_app(app)
    register_routes(app)

    from db import init_db, seed_db
    app.logger.info("Initializing database...")
    init_db(app)
    if app.config['SEED_DEMO_DATA']:
        seed_db(app)
    return app

def get_services():
    """Ledger services bound to the current request's session"""
    if 'services' not in g:
        g.services = build_services(
            RecordStore(db.session),
            monthly_goal_default=current_app.config['MONTHLY_GOAL_DEFAULT'],
        )
    return g.services

def payload():
    return request.get_json(silent=True) or {}

def register_routes(app):

    @app.errorhandler(LedgerError)
    def handle_ledger_error(error):
        app.logger.warning("%s: %s", type(error).__name__, error.message)
        return jsonify({'error': error.message}), error.status_code

    @app.route('/summary')
    def summary():
        """Dashboard figures: bankroll, profit, ROI, exposure and goal progress"""
        services = get_services()
        pending = services.bets.by_status('pending')
        return jsonify({
            'total_balance': services.transactions.total_balance(),
            'total_profit': services.bets.total_profit(),
            'overall_roi': services.bets.overall_roi(),
            'pending_count': len(pending),
            'pending_value': services.bets.total_pending_value(),
            'monthly_goal': services.settings.get_monthly_goal(),
            'monthly_progress': services.settings.monthly_progress(),
        })

    @app.route('/accounts', methods=['GET', 'POST'])
    def accounts():
        services = get_services()
        if request.method == 'POST':
            data = payload()
            account = services.accounts.create(data.get('name'), data.get('balance', 0))
            return jsonify(account.to_dict()), 201
        return jsonify([account.to_dict() for account in services.accounts.list_all()])

    @app.route('/accounts/<int:account_id>', methods=['GET', 'PATCH', 'DELETE'])
    def account_detail(account_id):
        services = get_services()
        if request.method == 'PATCH':
            account = services.accounts.rename(account_id, payload().get('name'))
        elif request.method == 'DELETE':
            services.accounts.remove(account_id)
            return '', 204
        else:
            account = services.accounts.get_or_raise(account_id)
        return jsonify(account.to_dict())

    @app.route('/accounts/<int:account_id>/deposit', methods=['POST'])
    def deposit(account_id):
        data = payload()
        entry = get_services().accounts.deposit(account_id, data.get('amount'), data.get('description', ''))
        return jsonify(entry.to_dict()), 201

    @app.route('/accounts/<int:account_id>/withdraw', methods=['POST'])
    def withdraw(account_id):
        data = payload()
        entry = get_services().accounts.withdraw(account_id, data.get('amount'), data.get('description', ''))
        return jsonify(entry.to_dict()), 201

    @app.route('/accounts/<int:account_id>/statement')
    def account_statement(account_id):
        entries = get_services().accounts.statement(account_id)
        return jsonify([entry.to_dict() for entry in entries])

    @app.route('/transfers', methods=['POST'])
    def transfer():
        data = payload()
        outgoing, incoming = get_services().accounts.transfer(
            data.get('from_id'), data.get('to_id'), data.get('amount'), data.get('description', '')
        )
        return jsonify({'outgoing': outgoing.to_dict(), 'incoming': incoming.to_dict()}), 201

    @app.route('/bets', methods=['GET', 'POST'])
    def bets():
        services = get_services()
        if request.method == 'POST':
            data = payload()
            bet = services.bets.create(
                data.get('account_id'),
                data.get('event_date'),
                data.get('event_name'),
                data.get('market'),
                data.get('stake'),
                data.get('odds'),
            )
            return jsonify(bet.to_dict()), 201

        account_id = request.args.get('account_id', type=int)
        status = request.args.get('status')
        date_from = request.args.get('date_from')
        date_to = request.args.get('date_to')

        if date_from and date_to:
            result = services.bets.filter_by_period(date_from, date_to)
        else:
            result = services.bets.list_all()
        if account_id:
            result = [bet for bet in result if bet.account_id == account_id]
        if status:
            wanted = parse_status(status)
            result = [bet for bet in result if bet.status == wanted]
        # Newest first
        result.sort(key=lambda bet: (bet.event_date, bet.id), reverse=True)
        return jsonify([bet.to_dict() for bet in result])

    @app.route('/bets/<int:bet_id>', methods=['GET', 'PATCH', 'DELETE'])
    def bet_detail(bet_id):
        services = get_services()
        if request.method == 'PATCH':
            bet = services.bets.edit(bet_id, **payload())
        elif request.method == 'DELETE':
            services.bets.delete(bet_id)
            return '', 204
        else:
            bet = services.bets.get_or_raise(bet_id)
        return jsonify(bet.to_dict())

    @app.route('/bets/<int:bet_id>/status', methods=['POST'])
    def bet_status(bet_id):
        bet = get_services().bets.update_status(bet_id, payload().get('status'))
        return jsonify(bet.to_dict())

    @app.route('/bets/<int:bet_id>/undo', methods=['POST'])
    def undo_bet(bet_id):
        entry = get_services().bets.undo(bet_id)
        return jsonify(entry.to_dict())

    @app.route('/profit-statement')
    def profit_statement():
        return jsonify(get_services().bets.profit_statement())

    @app.route('/history')
    def history():
        """Bankroll statement with optional account/type/date filters"""
        rows = get_services().transactions.bankroll_statement(
            account_id=request.args.get('account_id', type=int),
            type=request.args.get('type'),
            start=request.args.get('date_from'),
            end=request.args.get('date_to'),
        )
        return jsonify(rows)

    @app.route('/history.csv')
    def history_csv():
        """Export the transaction history as CSV"""
        rows = get_services().transactions.bankroll_statement()

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(['ID', 'Date', 'Betting House', 'Type', 'Description', 'Amount', 'Balance After'])

        for row in rows:
            writer.writerow([
                row['id'],
                row['timestamp'][:16].replace('T', ' ') if row['timestamp'] else '',
                row['account_name'],
                row['type'],
                row['description'],
                f"{row['amount']:.2f}",
                f"{row['balance_after']:.2f}",
            ])

        output.seek(0)
        return Response(
            output.getvalue(),
            mimetype='text/csv',
            headers={'Content-Disposition': 'attachment; filename=bankroll_history.csv'}
        )

    @app.route('/settings/monthly-goal', methods=['GET', 'PUT'])
    def monthly_goal():
        services = get_services()
        if request.method == 'PUT':
            services.settings.set_monthly_goal(payload().get('value'))
        return jsonify({
            'monthly_goal': services.settings.get_monthly_goal(),
            'monthly_progress': services.settings.monthly_progress(),
        })

if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_ENV') == 'development'
    app.run(host='0.0.0.0', port=port, debug=debug)
