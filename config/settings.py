from dotenv import load_dotenv
import os

# Load environment variables
load_dotenv()

MONGODB_URL = os.getenv('MONGODB_URL')
DATABASE_NAME = os.getenv('DATABASE_NAME', 'eventoria_db')

SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-me')
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', str(60 * 24)))
PASSWORD_RESET_EXPIRE_MINUTES = int(os.getenv('PASSWORD_RESET_EXPIRE_MINUTES', '30'))

# Newest entries kept in a user's notification log
NOTIFICATIONS_LIMIT = int(os.getenv('NOTIFICATIONS_LIMIT', '100'))
EVENTS_PAGE_SIZE = int(os.getenv('EVENTS_PAGE_SIZE', '20'))
EVENTS_MAX_PAGE_SIZE = 100

UPLOAD_DIR = os.getenv('UPLOAD_DIR', 'media')
MEDIA_URL = os.getenv('MEDIA_URL', '/media')
MAX_IMAGE_SIZE = 10 * 1024 * 1024
MIN_IMAGE_SIZE = 1024

FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:5173')
LOG_FILE = os.getenv('LOG_FILE', 'eventoria.log')

# SMS mirror, disabled unless all three are set
TWILIO_ACCOUNT_SID = os.getenv('TWILIO_ACCOUNT_SID')
TWILIO_AUTH_TOKEN = os.getenv('TWILIO_AUTH_TOKEN')
TWILIO_FROM_NUMBER = os.getenv('TWILIO_FROM_NUMBER')

SMTP_HOST = os.getenv('SMTP_HOST')
SMTP_PORT = int(os.getenv('SMTP_PORT', '587'))
SMTP_USERNAME = os.getenv('SMTP_USERNAME', '')
SMTP_PASSWORD = os.getenv('SMTP_PASSWORD', '')
SMTP_USE_TLS = os.getenv('SMTP_USE_TLS', 'true').lower() == 'true'
FROM_EMAIL = os.getenv('FROM_EMAIL', 'no-reply@eventoria.ro')

# Maximum messages buffered per live-channel subscription
EVENT_BUS_QUEUE_SIZE = int(os.getenv('EVENT_BUS_QUEUE_SIZE', '100'))

MONGODB_MAX_POOL_SIZE = int(os.getenv('MONGODB_MAX_POOL_SIZE', '50'))
MONGODB_CONNECT_RETRIES = int(os.getenv('MONGODB_CONNECT_RETRIES', '3'))
MONGODB_RETRY_DELAY = float(os.getenv('MONGODB_RETRY_DELAY', '1'))
