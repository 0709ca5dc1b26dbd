from flask import Blueprint, jsonify
from balance import lobby

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Balance Scale game server!'})

@main.route('/state')
def get_state():
    """Read-only view of the shared session: roster, round, last choices."""
    return jsonify(lobby.snapshot())
