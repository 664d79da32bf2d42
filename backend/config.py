"""
Configuration et utilitaires partagés
"""

import os
import re
import random
import string
import secrets
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
from pathlib import Path

# Charger .env
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'print_crm')

client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

# Scheduler (reset quotidien des compteurs sales)
SCHEDULER_ENABLED = os.environ.get('SCHEDULER_ENABLED', 'false').lower() == 'true'
SCHEDULER_TIMEZONE = os.environ.get('SCHEDULER_TIMEZONE', 'Asia/Ho_Chi_Minh')

# Objectif de chiffre d'affaires mensuel par commercial (VND)
REVENUE_TARGET = float(os.environ.get('REVENUE_TARGET', '40000000'))


# ==================== HELPERS ====================

def generate_api_key() -> str:
    """Génère une clé API pour les webhooks d'une source de leads"""
    return f"src_{secrets.token_urlsafe(32)}"


def now_iso() -> str:
    """Retourne la date/heure actuelle en ISO"""
    return datetime.now(timezone.utc).isoformat()


def today_start_iso() -> str:
    """Début de la journée courante (UTC) en ISO"""
    now = datetime.now(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0).isoformat()


def search_regex(search: str) -> dict:
    """Filtre Mongo "contient" insensible à la casse, texte saisi pris littéralement"""
    return {"$regex": re.escape(search.strip()), "$options": "i"}


def _to_base36(number: int) -> str:
    chars = string.digits + string.ascii_uppercase
    if number == 0:
        return "0"
    out = ""
    while number:
        number, rem = divmod(number, 36)
        out = chars[rem] + out
    return out


def generate_code(prefix: str) -> str:
    """
    Code métier lisible: PREFIX + horodatage base36 + 4 caractères aléatoires.

    Préfixes utilisés: KH (client), DH (commande), PAY (paiement),
    BG (devis), NV (commercial), SP (règle d'allocation), PG (groupe produit)
    """
    stamp = _to_base36(int(datetime.now(timezone.utc).timestamp() * 1000))
    suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"{prefix}{stamp}{suffix}"


VN_PHONE_PATTERN = re.compile(r'^0[0-9]{9,10}$')


def normalize_phone_vn(phone: str) -> tuple[str, str]:
    """
    Normalise et valide un numéro de téléphone vietnamien.
    FORMAT UNIQUE EN BASE: 0XXXXXXXXX (10 ou 11 chiffres, commence par 0)

    Pipeline:
      1. Supprimer tous les caractères non numériques
      2. Gestion indicatif Vietnam (+84, 0084, 84)
      3. Validation stricte

    Returns: (status, normalized_or_error)
      status: "valid" | "invalid"
    """
    if not phone or not phone.strip():
        return "invalid", "Numéro vide"

    # ═══════ ÉTAPE 1: Nettoyer ═══════
    digits = ''.join(filter(str.isdigit, phone))

    if not digits:
        return "invalid", "Aucun chiffre détecté"

    # ═══════ ÉTAPE 2: Indicatif Vietnam ═══════
    if digits.startswith("0084"):
        digits = "0" + digits[4:]
    elif digits.startswith("84") and len(digits) in (11, 12):
        digits = "0" + digits[2:]

    # ═══════ ÉTAPE 3: Validation stricte ═══════
    if not VN_PHONE_PATTERN.match(digits):
        return "invalid", f"Numéro invalide: {phone} (0 + 9 à 10 chiffres requis)"

    if len(set(digits[1:])) == 1:
        return "invalid", f"Numéro bloqué: {digits} (chiffres identiques)"

    return "valid", digits
