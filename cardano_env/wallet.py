"""HD wallet for test accounts: payment and stake keys plus a base address."""

import logging
from datetime import datetime
from typing import List, Optional

from pycardano import (
    Address,
    ExtendedSigningKey,
    HDWallet,
    InvalidHereAfter,
    NativeScript,
    Network,
    PaymentVerificationKey,
    ScriptAll,
    ScriptPubkey,
    StakeVerificationKey,
)

from .cardano import slot_from_datetime

logger = logging.getLogger(__name__)

# CIP-1852 roles
EXTERNAL_CHAIN = 0
STAKING = 2


class Wallet:
    """
    Keys derived along m/1852'/1815'/account'/role/index.

    Payment and stake keys come from their own roles; the base address
    combines both key hashes.

    The seed is derived with `passphrase` (empty by default, plain BIP39).
    Accounts created by the legacy test harness used the passphrase "test";
    pass `passphrase="test"` to restore their addresses.
    """

    def __init__(
        self,
        mnemonic: str,
        account: int = 0,
        index: int = 0,
        network: Network = Network.TESTNET,
        passphrase: str = "",
    ):
        self.mnemonic = mnemonic
        self.account = account
        self.index = index
        self.network = network

        root = HDWallet.from_mnemonic(mnemonic, passphrase=passphrase)
        account_path = f"m/1852'/1815'/{account}'"
        payment = root.derive_from_path(f"{account_path}/{EXTERNAL_CHAIN}/{index}")
        stake = root.derive_from_path(f"{account_path}/{STAKING}/{index}")

        self.payment_signing_key = ExtendedSigningKey.from_hdwallet(payment)
        self.payment_verification_key = PaymentVerificationKey.from_primitive(payment.public_key)
        self.stake_signing_key = ExtendedSigningKey.from_hdwallet(stake)
        self.stake_verification_key = StakeVerificationKey.from_primitive(stake.public_key)

        self.address = Address(
            payment_part=self.payment_verification_key.hash(),
            staking_part=self.stake_verification_key.hash(),
            network=network,
        )

    @classmethod
    def from_mnemonic(cls, mnemonic: str, **kwargs) -> "Wallet":
        return cls(mnemonic, **kwargs)

    @classmethod
    def generate(cls, words: int = 24, **kwargs) -> "Wallet":
        """New wallet from a fresh mnemonic. Keep `wallet.mnemonic` to restore it."""
        strength = {12: 128, 15: 160, 18: 192, 21: 224, 24: 256}[words]
        wallet = cls(HDWallet.generate_mnemonic(strength=strength), **kwargs)
        logger.info(f"Generated wallet {wallet.address}")
        return wallet

    @property
    def public_key_hash(self) -> str:
        return self.payment_verification_key.hash().payload.hex()

    def policy_script(self, invalid_after: Optional[datetime] = None) -> NativeScript:
        """Minting policy: signed by the payment key, optionally locked after a time."""
        scripts: List[NativeScript] = [ScriptPubkey(self.payment_verification_key.hash())]
        if invalid_after is not None:
            scripts.append(InvalidHereAfter(slot_from_datetime(invalid_after)))
        return ScriptAll(scripts)

    def policy_id(self, invalid_after: Optional[datetime] = None) -> bytes:
        return self.policy_script(invalid_after).hash().payload

    def __repr__(self) -> str:
        return f"Wallet(account={self.account}, index={self.index}, address={self.address})"


def cbor_hex_payload(key_bytes: bytes) -> str:
    """CBOR bytestring header (major type 2, one-byte length) plus key hex."""
    return f"58{len(key_bytes):02x}{key_bytes.hex()}"


def key_bytes_from_cbor_hex(cbor_hex: str) -> bytes:
    """Inverse of cbor_hex_payload: drop the 2-byte header."""
    return bytes.fromhex(cbor_hex[4:])
