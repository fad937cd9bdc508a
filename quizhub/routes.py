from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({
        'message': 'Quiz room server is running',
        'rooms': len(current_app.extensions['room_registry']),
    })
