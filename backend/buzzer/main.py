from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    registry = current_app.extensions['room_registry']
    return jsonify({'message': 'Welcome to the Buzzer game server!', 'rooms': len(registry)})

@main.route('/health')
def health_check():
    return "OK", 200
