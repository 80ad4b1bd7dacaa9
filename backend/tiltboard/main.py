from flask import Blueprint, jsonify

from tiltboard.services.session import get_engine

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Tiltboard session server!'})

@main.route('/api/health')
def health():
    return jsonify(get_engine().health())
