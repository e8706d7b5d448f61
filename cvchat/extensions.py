from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_bcrypt import Bcrypt
from flask_cors import CORS

from cvchat.services.rate_limit import RateLimit

cors = CORS()

db = SQLAlchemy()
migrate = Migrate()

# login manager for handling JWTs
jwt = JWTManager()

bcrypt = Bcrypt()

# per-app request limiter, injectable through create_app
rate_limit = RateLimit()
