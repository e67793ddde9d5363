#!/usr/bin/env python3
"""
Web interface for the Multi-Signature Wallet
"""

from flask import Flask, request, jsonify
import logging
import os
import threading

from multisig.config import WalletConfig
from multisig.identity import OwnerKey
from multisig.errors import (
    MultiSigError,
    ConfigError,
    NotAuthorized,
    NotFound,
    InvalidTarget,
    ExecutionFailed,
)

logger = logging.getLogger(__name__)

app = Flask(__name__)

# In-memory registry (in production, use proper storage)
wallets = {}

# Serializes signature check + ledger call so the nonce cannot move in between
_request_lock = threading.Lock()

OWNER_ACTIONS = ('confirm', 'revoke', 'execute')


def signing_message(wallet_id: str, nonce: int, action: str, *parts) -> bytes:
    """Canonical bytes an owner signs to authorize a request"""
    return ":".join([wallet_id, str(nonce), action] + [str(p) for p in parts]).encode()


def _status_for(error: MultiSigError) -> int:
    if isinstance(error, NotAuthorized):
        return 403
    if isinstance(error, NotFound):
        return 404
    if isinstance(error, (ConfigError, InvalidTarget)):
        return 400
    if isinstance(error, ExecutionFailed):
        return 502
    return 409


@app.errorhandler(MultiSigError)
def handle_wallet_error(error):
    logger.info("Rejected: %s", error)
    return jsonify({'success': False, 'error': str(error), 'type': type(error).__name__}), _status_for(error)


@app.errorhandler(ValueError)
def handle_bad_value(error):
    return jsonify({'success': False, 'error': str(error)}), 400


def _get_wallet(wallet_id):
    wallet = wallets.get(wallet_id)
    if wallet is None:
        return None, (jsonify({'error': 'Wallet not found'}), 404)
    return wallet, None


def _authenticated_caller(wallet, action, *parts):
    """Return the caller if its signature covers this request, else None"""
    data = request.get_json(silent=True) or {}
    caller = data.get('caller')
    signature = data.get('signature')
    if not isinstance(caller, str) or not isinstance(signature, str) or not caller or not signature:
        return None
    message = signing_message(wallet.wallet_id, wallet.nonce, action, *parts)
    if not OwnerKey.verify_signature(message, signature, caller):
        logger.warning("Bad signature for %s on %s", caller[:16], action)
        return None
    return caller


def _unauthenticated():
    return jsonify({'success': False, 'error': 'Missing or invalid signature'}), 401


@app.route('/')
def index():
    return jsonify({'service': 'multisig', 'wallets': len(wallets)})


@app.route('/api/wallets', methods=['POST'])
def create_wallet():
    """Deploy a new wallet from owners and threshold"""
    data = request.get_json(silent=True) or {}
    config = WalletConfig.from_dict(data)
    wallet = config.build_wallet()

    if wallet.wallet_id in wallets:
        return jsonify({'success': False, 'error': 'Wallet already exists'}), 409
    wallets[wallet.wallet_id] = wallet

    logger.info("Created wallet %s", wallet.wallet_id)
    return jsonify({
        'success': True,
        'wallet_id': wallet.wallet_id,
        'owners': wallet.get_owners(),
        'threshold': wallet.threshold,
    }), 201


@app.route('/api/wallets/<wallet_id>')
def get_wallet(wallet_id):
    wallet, error = _get_wallet(wallet_id)
    if error:
        return error

    return jsonify({
        'wallet_id': wallet_id,
        'owners': wallet.get_owners(),
        'threshold': wallet.threshold,
        'balance': wallet.get_balance(),
        'transaction_count': wallet.get_transaction_count(),
        'nonce': wallet.nonce,
    })


@app.route('/api/wallets/<wallet_id>/deposit', methods=['POST'])
def deposit(wallet_id):
    """Anyone may fund a wallet"""
    wallet, error = _get_wallet(wallet_id)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    if 'sender' not in data or 'amount' not in data:
        return jsonify({'success': False, 'error': 'sender and amount are required'}), 400

    balance = wallet.deposit(data['sender'], data['amount'])
    return jsonify({'success': True, 'balance': balance})


@app.route('/api/wallets/<wallet_id>/transactions', methods=['POST'])
def submit_transaction(wallet_id):
    wallet, error = _get_wallet(wallet_id)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    if 'to' not in data or 'value' not in data:
        return jsonify({'success': False, 'error': 'to and value are required'}), 400
    payload = data.get('data', '0x')

    with _request_lock:
        caller = _authenticated_caller(wallet, 'submit', data['to'], data['value'], payload)
        if caller is None:
            return _unauthenticated()
        index = wallet.submit(caller, data['to'], data['value'], payload)

    return jsonify({'success': True, 'index': index}), 201


@app.route('/api/wallets/<wallet_id>/transactions/<int:index>')
def get_transaction(wallet_id, index):
    wallet, error = _get_wallet(wallet_id)
    if error:
        return error

    tx = wallet.get_transaction(index)
    info = tx.to_dict()
    info['index'] = index
    info['confirmations'] = wallet.get_confirmations(index)
    return jsonify(info)


@app.route('/api/wallets/<wallet_id>/transactions/<int:index>/<action>', methods=['POST'])
def owner_action(wallet_id, index, action):
    """Confirm, revoke or execute a transaction"""
    if action not in OWNER_ACTIONS:
        return jsonify({'success': False, 'error': f'Unknown action {action}'}), 404

    wallet, error = _get_wallet(wallet_id)
    if error:
        return error

    with _request_lock:
        caller = _authenticated_caller(wallet, action, index)
        if caller is None:
            return _unauthenticated()
        getattr(wallet, action)(caller, index)

    return jsonify({'success': True, 'transaction': wallet.get_transaction(index).to_dict()})


@app.route('/api/wallets/<wallet_id>/events')
def get_events(wallet_id):
    wallet, error = _get_wallet(wallet_id)
    if error:
        return error

    return jsonify({'events': [e.to_dict() for e in wallet.events()]})


def configure_logging():
    level = os.environ.get("MULTISIG_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


if __name__ == "__main__":
    configure_logging()
    port = int(os.environ.get("PORT", 10000))
    app.run(
        host="0.0.0.0",
        port=port,
        debug=False
    )
