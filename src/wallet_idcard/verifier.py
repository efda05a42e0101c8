"""Verification of caller-supplied Stacks payment transactions."""

from __future__ import annotations

import logging
import re

from .chain import ChainDataClient
from .models import PaymentVerdict, TransactionPayload, VerdictReason

logger = logging.getLogger("wallet_idcard.verifier")

_TXID_DIGITS = re.compile(r"^[0-9a-f]{64}$")

CONFIRMED_STATUS = "success"
CONTRACT_CALL = "contract_call"


class MalformedClaimError(ValueError):
    """Raised when a payment claim cannot be read as a transaction id."""


def normalize_txid(raw: str) -> str:
    """Return ``raw`` as a ``0x``-prefixed, lowercase, 64-digit hex txid."""
    value = (raw or "").strip().lower()
    if value.startswith("0x"):
        value = value[2:]
    if not _TXID_DIGITS.match(value):
        raise MalformedClaimError("Payment proof must be a 64-character hex transaction id")
    return "0x" + value


class PaymentVerifier:
    """Classify a claimed payment transaction against the expected contract.

    Nothing is remembered between calls, so a txid that verified once will
    verify again.
    """

    def __init__(self, client: ChainDataClient, expected_contract: str) -> None:
        self._client = client
        self._expected_contract = expected_contract

    async def verify(self, raw_claim: str) -> PaymentVerdict:
        verdict = await self._verify(raw_claim)
        if verdict.valid:
            logger.info("payment verified txid=%s payer=%s", verdict.txid, verdict.payer)
        else:
            logger.warning(
                "payment rejected txid=%s reason=%s", verdict.txid, verdict.reason.value
            )
        return verdict

    async def _verify(self, raw_claim: str) -> PaymentVerdict:
        try:
            txid = normalize_txid(raw_claim)
        except MalformedClaimError as exc:
            return PaymentVerdict.rejected(VerdictReason.MALFORMED_CLAIM, str(exc))

        lookup = await self._client.get_transaction(txid)
        if lookup.error is not None:
            return PaymentVerdict.rejected(
                VerdictReason.LOOKUP_ERROR,
                f"Could not look up transaction: {lookup.error}",
                txid,
            )
        if not lookup.found or lookup.payload is None:
            return PaymentVerdict.rejected(VerdictReason.NOT_FOUND, "Transaction not found", txid)

        return self.classify(txid, lookup.payload)

    def classify(self, txid: str, tx: TransactionPayload) -> PaymentVerdict:
        if tx.tx_status != CONFIRMED_STATUS:
            return PaymentVerdict.rejected(
                VerdictReason.WRONG_STATUS,
                f"Transaction status is {tx.tx_status or 'unknown'}, expected {CONFIRMED_STATUS}",
                txid,
            )
        if tx.tx_type != CONTRACT_CALL:
            return PaymentVerdict.rejected(
                VerdictReason.WRONG_OPERATION_KIND,
                f"Transaction type is {tx.tx_type or 'unknown'}, expected {CONTRACT_CALL}",
                txid,
            )
        contract_id = tx.contract_call.contract_id if tx.contract_call else None
        if contract_id != self._expected_contract:
            return PaymentVerdict.rejected(
                VerdictReason.WRONG_TARGET_CONTRACT,
                f"Transaction calls {contract_id or 'no contract'}, expected {self._expected_contract}",
                txid,
            )
        return PaymentVerdict.accepted(txid, tx.sender_address)
