from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from arena import db
from arena.models import Account

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the arena game server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'service': 'arena'})


@main.route('/register', methods=['POST', 'OPTIONS'])
def register():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password')
    if not username or not password:
        return jsonify({'error': 'Missing username or password'}), 400

    if Account.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already exists'}), 400

    account = Account(username=username, display_name=data.get('display_name'))
    account.set_password(password)
    db.session.add(account)
    db.session.commit()
    login_user(account)
    return jsonify({'success': True, 'account': account.to_dict()}), 201


@main.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    account = Account.query.filter_by(username=data.get('username')).first()
    if account and account.check_password(data.get('password') or ''):
        login_user(account, remember=True)
        return jsonify({'success': True, 'account': account.to_dict()})
    return jsonify({'error': 'Invalid username or password'}), 401


@main.route('/check_login', methods=['GET'])
@login_required
def check_login():
    return jsonify({'success': True, 'account': current_user.to_dict()})


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})
