from functools import wraps

from flask import jsonify
from flask_login import current_user

from access import can_mutate_orders


def admin_required(f):
    # role is looked up again on every request, never taken from the session
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not can_mutate_orders(current_user):
            return jsonify({
                "success": False,
                "error": "Admin access required"
            }), 403
        return f(*args, **kwargs)
    return decorated_function
