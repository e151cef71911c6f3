# main_client_demo.py
"""
Walks a rights client through a typical session against a running service:
load (or create) this device's identity, log in or register, create a
document, encrypt and decrypt a few texts with it and sign them.

Configuration comes from the environment (see rights_client/config.py).
"""
import asyncio
import os
import sys

from client_crypto.client_crypto import ClientCrypto
from pre_primitives.software_primitives import SoftwarePrimitives
from rights_client.client import RightsClient
from rights_client.config import ClientConfig, IDENTITY_PASSPHRASE_ENV
from rights_client.identity_store import IdentityStoreError, generate_identity, load_identity, save_identity
from rights_client.logging_setup import configure_logging
from rights_protocol.errors import RightsClientError
from rights_protocol.service import RemoteHttpService


async def load_or_create_identity(config: ClientConfig, primitives: SoftwarePrimitives):
    if os.path.exists(config.identity_file):
        print(f"[Setup] Loading identity from '{config.identity_file}'")
        return load_identity(config.identity_file, config.identity_passphrase)
    identity = await generate_identity(primitives)
    save_identity(config.identity_file, identity, config.identity_passphrase)
    print(f"[Setup] New identity written to '{config.identity_file}'")
    return identity


async def run_demo(config: ClientConfig) -> None:
    primitives = SoftwarePrimitives()
    identity = await load_or_create_identity(config, primitives)
    client_crypto = ClientCrypto(primitives, identity.sign_key_pair, identity.crypt_key_pair)

    async with RemoteHttpService(config.service_url, timeout_seconds=config.http_timeout_seconds) as service:
        client = RightsClient(client_crypto, service)
        print(f"[Setup] Client id: {client.client_id}")

        session = await client.login(client.new_session())
        if not session.is_logged_in:
            print("[Action] Client not registered yet, registering a new account...")
            session = await client.register_account(session)
        print(f"[Result] Account: {session.account_id}  Root document: {session.root_document_id}")

        document_id = await client.create_document(session)
        print(f"[Result] Created document {document_id}")

        texts = ["first paragraph", "second paragraph"]
        ciphertexts = await client.encrypt_document_texts(document_id, texts)
        plaintexts = await client.decrypt_document_texts(document_id, ciphertexts)
        print(f"[Result] Round trip {'OK' if plaintexts == texts else 'MISMATCH'}")

        signatures = await client.sign_document_texts(document_id, texts)
        print(f"[Result] {len(signatures)} signature(s) returned")


def main() -> int:
    config = ClientConfig.from_env()
    configure_logging(config.log_level)
    if not config.identity_passphrase:
        print(f"ERROR: set {IDENTITY_PASSPHRASE_ENV} to protect this device's identity file.")
        return 2
    try:
        asyncio.run(run_demo(config))
    except (RightsClientError, IdentityStoreError) as e:
        print(f"ERROR: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
