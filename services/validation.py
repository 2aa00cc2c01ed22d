"""
Form validation for registration, sign-in, service submissions, listing
edits and booking requests.

Each validator returns a dict mapping field name to a Romanian message; an
empty dict means the form is valid. Callers turn a non-empty result into a
FormValidationError before anything is written.
"""

from datetime import date
from typing import Dict, List, Optional
import re
import unicodedata
from email_validator import validate_email, EmailNotValidError
from schemas.user import UserCreate, Role
from schemas.event import ServiceSubmission, EventUpdate, Price
from schemas.request import BookingRequestCreate
from scripts.time_parse import try_parse_date, try_parse_time

PHONE_PATTERN = re.compile(r'^(\+40|0)[0-9]{9}$')
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
PERSON_NAME_PATTERN = re.compile(r'^[a-zA-ZăâîșțĂÂÎȘȚşţŞŢ\s]+$')
LETTER_PATTERN = re.compile(r'[a-zA-Z]')
DIGIT_PATTERN = re.compile(r'[0-9]')
LOCATION_PATTERN = re.compile(r'^[a-zA-ZăâîșțĂÂÎȘȚşţŞŢ0-9\s,.\-]+$')
HAS_ALNUM_PATTERN = re.compile(r'[a-zA-ZăâîșțĂÂÎȘȚşţŞŢ0-9]')

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128
MAX_EMAIL_LENGTH = 100
MAX_PRICE = 1_000_000

# Romanian cities a booking location must mention, without diacritics
ROMANIAN_CITIES = [
    'bucuresti', 'cluj-napoca', 'timisoara', 'iasi', 'constanta', 'craiova', 'brasov',
    'galati', 'ploiesti', 'oradea', 'bacau', 'pitesti', 'arad', 'sibiu', 'targu mures',
    'baia mare', 'buzau', 'botosani', 'satu mare', 'ramnicu valcea', 'drobeta-turnu severin',
    'suceava', 'piatra neamt', 'targu jiu', 'tulcea', 'focsani', 'bistrita', 'resita',
    'alba iulia', 'deva', 'hunedoara', 'slatina', 'calarasi', 'giurgiu', 'slobozia',
    'vaslui', 'roman', 'turda', 'medias', 'onesti', 'campina', 'dej', 'lugoj', 'medgidia'
]


def remove_diacritics(value: str) -> str:
    decomposed = unicodedata.normalize('NFKD', value.lower())
    return ''.join(c for c in decomposed if not unicodedata.combining(c))


def capitalize_words(value: str) -> str:
    return ' '.join(word[:1].upper() + word[1:].lower() for word in value.split(' '))


def clean_phone(phone: str) -> str:
    return re.sub(r'\s', '', phone or '')


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(clean_phone(phone)))


def is_valid_email(email: str) -> bool:
    email = (email or '').strip()
    if not EMAIL_PATTERN.match(email):
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_location(location: str) -> Optional[str]:
    trimmed = (location or '').strip()

    if not trimmed:
        return 'Locația evenimentului este obligatorie'
    if len(trimmed) < 3:
        return 'Locația trebuie să conțină cel puțin 3 caractere'
    if len(trimmed) > 200:
        return 'Locația nu poate depăși 200 de caractere'
    if not LOCATION_PATTERN.match(trimmed):
        return 'Locația poate conține doar litere, cifre, spații și semne de punctuație'

    normalized = remove_diacritics(trimmed)
    if not any(city in normalized for city in ROMANIAN_CITIES):
        return 'Locația trebuie să conțină un oraș din România (ex: București, Cluj-Napoca, Timișoara)'

    if not HAS_ALNUM_PATTERN.search(trimmed):
        return 'Locația trebuie să conțină cel puțin o literă sau cifră'

    return None


def _validate_person_name(name: str) -> Optional[str]:
    if not name.strip():
        return 'Numele complet este obligatoriu'
    if len(name) < 2:
        return 'Numele trebuie să conțină cel puțin 2 caractere'
    if len(name) > 50:
        return 'Numele nu poate depăși 50 de caractere'
    if not PERSON_NAME_PATTERN.match(name):
        return 'Numele poate conține doar litere și spații'
    if len(name.split()) < 2:
        return 'Vă rugăm să introduceți numele și prenumele'
    return None


def _validate_registration_email(email: str) -> Optional[str]:
    email = email.strip()
    if not email:
        return 'Adresa de email este obligatorie'
    if ' ' in email:
        return 'Adresa de email nu poate conține spații'
    if len(email) > MAX_EMAIL_LENGTH:
        return 'Adresa de email este prea lungă'
    if not is_valid_email(email):
        return 'Adresa de email nu este validă.'
    return None


def _validate_new_password(password: str) -> Optional[str]:
    if not password:
        return 'Parola este obligatorie'
    if len(password) < MIN_PASSWORD_LENGTH:
        return 'Parola trebuie să conțină cel puțin 6 caractere'
    if len(password) > MAX_PASSWORD_LENGTH:
        return 'Parola nu poate depăși 128 de caractere'
    if not password.strip():
        return 'Parola nu poate fi goală'
    if ' ' in password:
        return 'Parola nu poate conține spații'
    if not LETTER_PATTERN.search(password):
        return 'Parola trebuie să conțină cel puțin o literă'
    if not DIGIT_PATTERN.search(password):
        return 'Parola trebuie să conțină cel puțin o cifră'
    return None


def validate_registration(data: UserCreate) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    for field, error in (
        ('name', _validate_person_name(data.name)),
        ('email', _validate_registration_email(data.email)),
        ('password', _validate_new_password(data.password)),
    ):
        if error:
            errors[field] = error

    if not data.confirm_password:
        errors['confirm_password'] = 'Confirmarea parolei este obligatorie'
    elif data.password != data.confirm_password:
        errors['confirm_password'] = 'Parolele nu se potrivesc'

    if data.role == Role.admin:
        errors['role'] = 'Rolul selectat nu este permis'

    return errors


def validate_login(email: str, password: str) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    email = (email or '').strip()

    if not email:
        errors['email'] = 'Adresa de email este obligatorie'
    elif not is_valid_email(email):
        errors['email'] = 'Vă rugăm să introduceți o adresă de email validă (ex: nume@exemplu.ro)'

    if not password:
        errors['password'] = 'Parola este obligatorie'
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors['password'] = 'Parola trebuie să conțină cel puțin 6 caractere'

    return errors


def _validate_name(name: str) -> Optional[str]:
    name = (name or '').strip()
    if not name:
        return 'Numele serviciului este obligatoriu'
    if len(name) < 3:
        return 'Numele serviciului trebuie să conțină cel puțin 3 caractere'
    if len(name) > 100:
        return 'Numele serviciului nu poate depăși 100 de caractere'
    return None


def _validate_description(description: str) -> Optional[str]:
    description = (description or '').strip()
    if not description:
        return 'Descrierea serviciului este obligatorie'
    if len(description) < 20:
        return 'Descrierea trebuie să conțină cel puțin 20 de caractere'
    if len(description) > 2000:
        return 'Descrierea nu poate depăși 2000 de caractere'
    return None


def _validate_price(price: Price) -> Optional[str]:
    if not price.amount or price.amount <= 0:
        return 'Prețul trebuie să fie mai mare decât 0'
    if price.amount > MAX_PRICE:
        return 'Prețul nu poate depăși 1.000.000 RON'
    return None


def _validate_availability_date(value: str, today: date) -> Optional[str]:
    if not (value or '').strip():
        return 'Data disponibilității este obligatorie'
    parsed = try_parse_date(value)
    if parsed is None:
        return 'Data disponibilității nu este validă'
    if parsed < today:
        return 'Data disponibilității nu poate fi în trecut'
    return None


def _non_empty(values: List[str]) -> List[str]:
    return [v.strip() for v in values if v and v.strip()]


def validate_service_submission(data: ServiceSubmission, today: Optional[date] = None) -> Dict[str, str]:
    today = today or date.today()
    errors: Dict[str, str] = {}

    name_error = _validate_name(data.name)
    if name_error:
        errors['name'] = name_error

    description_error = _validate_description(data.description)
    if description_error:
        errors['description'] = description_error

    if not data.category_id.strip():
        errors['category_id'] = 'Selectarea unei categorii este obligatorie'

    if not _non_empty(data.subcategories):
        errors['subcategories'] = 'Trebuie să selectați cel puțin o subcategorie'

    price_error = _validate_price(data.price)
    if price_error:
        errors['price'] = price_error

    if not _non_empty(data.locations):
        errors['locations'] = 'Trebuie să selectați cel puțin o locație'

    date_error = _validate_availability_date(data.date, today)
    if date_error:
        errors['date'] = date_error

    if not data.image_url.strip():
        errors['image_url'] = 'Imaginea serviciului este obligatorie'

    if not data.phone.strip():
        errors['phone'] = 'Numărul de telefon este obligatoriu'
    elif not is_valid_phone(data.phone):
        errors['phone'] = 'Numărul de telefon nu este valid (ex: 0721234567 sau +40721234567)'

    if not data.email.strip():
        errors['email'] = 'Adresa de email este obligatorie'
    elif not is_valid_email(data.email):
        errors['email'] = 'Adresa de email nu este validă'

    if not _non_empty(data.tags):
        errors['tags'] = 'Trebuie să selectați cel puțin un tag'

    return errors


def validate_event_update(data: EventUpdate, today: Optional[date] = None) -> Dict[str, str]:
    today = today or date.today()
    errors: Dict[str, str] = {}

    for field, error in (
        ('name', _validate_name(data.name)),
        ('description', _validate_description(data.description)),
        ('price', _validate_price(data.price)),
        ('date', _validate_availability_date(data.date, today)),
    ):
        if error:
            errors[field] = error

    if not _non_empty(data.locations):
        errors['locations'] = 'Trebuie să selectați cel puțin o locație'

    return errors


def validate_booking(data: BookingRequestCreate, today: Optional[date] = None) -> Dict[str, str]:
    today = today or date.today()
    errors: Dict[str, str] = {}

    if not data.phone.strip():
        errors['phone'] = 'Numărul de telefon este obligatoriu'
    elif not is_valid_phone(data.phone):
        errors['phone'] = 'Numărul de telefon nu este valid (ex: 0721234567 sau +40721234567)'

    location_error = validate_location(data.location)
    if location_error:
        errors['location'] = location_error

    start_date = try_parse_date(data.start_date)
    if not data.start_date.strip():
        errors['start_date'] = 'Data de început este obligatorie'
    elif start_date is None:
        errors['start_date'] = 'Data de început nu este validă'
    elif start_date < today:
        errors['start_date'] = 'Data de început nu poate fi în trecut'

    start_time = try_parse_time(data.start_time)
    if not data.start_time.strip():
        errors['start_time'] = 'Ora de început este obligatorie'
    elif start_time is None:
        errors['start_time'] = 'Ora de început nu este validă'

    end_date = try_parse_date(data.end_date)
    if not data.end_date.strip():
        errors['end_date'] = 'Data de sfârșit este obligatorie'
    elif end_date is None:
        errors['end_date'] = 'Data de sfârșit nu este validă'
    elif start_date and end_date < start_date:
        errors['end_date'] = 'Data de sfârșit nu poate fi înainte de data de început'

    end_time = try_parse_time(data.end_time)
    if not data.end_time.strip():
        errors['end_time'] = 'Ora de sfârșit este obligatorie'
    elif end_time is None:
        errors['end_time'] = 'Ora de sfârșit nu este validă'
    elif start_date and start_date == end_date and start_time and end_time <= start_time:
        errors['end_time'] = 'Ora de sfârșit trebuie să fie după ora de început'

    message = data.message.strip()
    if not message:
        errors['message'] = 'Mesajul este obligatoriu'
    elif len(message) < 10:
        errors['message'] = 'Mesajul trebuie să conțină cel puțin 10 caractere'
    elif len(message) > 1000:
        errors['message'] = 'Mesajul nu poate depăși 1000 de caractere'

    return errors
