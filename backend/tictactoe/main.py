from flask import Blueprint, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return 'TicTacToe Server is running!'

@main.route('/api/test')
def health():
    return jsonify({'status': 'ok', 'message': 'Server is running'})
