from flask import Blueprint, render_template

home_bp = Blueprint("home_bp", __name__)


@home_bp.route("/", methods=["GET"])
def index():
    return render_template("index.html")


__all__ = ["home_bp"]
