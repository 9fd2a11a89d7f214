import logging
from dataclasses import dataclass
from typing import Optional

from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import Web3Exception

import config
from modules.tokens.errors import ContractConfigurationError, ContractError

logger = logging.getLogger(__name__)

TX_RECEIPT_TIMEOUT = 120

MANIFESTO_MINTER_ABI = [
    {
        "name": "mint",
        "type": "function",
        "inputs": [
            {"name": "name", "type": "string"},
            {"name": "signatureHash", "type": "string"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "name": "tokenURI",
        "type": "function",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
    },
    {
        "name": "ownerOf",
        "type": "function",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
    },
    {
        "name": "signatureMetadata",
        "type": "function",
        "inputs": [{"name": "", "type": "uint256"}],
        "outputs": [
            {"name": "name", "type": "string"},
            {"name": "timestamp", "type": "uint256"},
            {"name": "signer", "type": "address"},
        ],
        "stateMutability": "view",
    },
    {
        "name": "setTokenURI",
        "type": "function",
        "inputs": [
            {"name": "tokenId", "type": "uint256"},
            {"name": "uri", "type": "string"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "name": "ManifestoSigned",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "signer", "type": "address", "indexed": True},
            {"name": "tokenId", "type": "uint256", "indexed": True},
            {"name": "name", "type": "string", "indexed": False},
            {"name": "timestamp", "type": "uint256", "indexed": False},
        ],
    },
]

CHAIN_ERRORS = (Web3Exception, RequestException, ValueError)


@dataclass(frozen=True)
class SignatureMetadata:
    name: str
    timestamp: Optional[int]
    signer: str


@dataclass(frozen=True)
class MintResult:
    token_id: int
    transaction_hash: str


class ContractGateway:
    """Lee y escribe en el contrato de minteo del manifiesto"""

    def __init__(self, web3: Web3, contract_address: str, owner_private_key: Optional[str] = None):
        self.web3 = web3
        self.contract = web3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=MANIFESTO_MINTER_ABI,
        )
        self._owner_key = owner_private_key
        self._owner = web3.eth.account.from_key(owner_private_key) if owner_private_key else None

    @classmethod
    def from_config(cls) -> "ContractGateway":
        if not config.RPC_URL or not config.CONTRACT_ADDRESS:
            raise ContractConfigurationError("RPC_URL and CONTRACT_ADDRESS must be set")
        web3 = Web3(Web3.HTTPProvider(config.RPC_URL))
        return cls(web3, config.CONTRACT_ADDRESS, config.CONTRACT_OWNER_PRIVATE_KEY)

    # -- lecturas ---------------------------------------------------------

    def signature_metadata(self, token_id: int) -> SignatureMetadata:
        try:
            name, timestamp, signer = self.contract.functions.signatureMetadata(token_id).call()
        except CHAIN_ERRORS as e:
            raise ContractError(f"signatureMetadata({token_id}) failed: {e}") from e
        return SignatureMetadata(name=name or "", timestamp=int(timestamp) if timestamp else None, signer=signer or "")

    def token_uri(self, token_id: int) -> str:
        try:
            return self.contract.functions.tokenURI(token_id).call()
        except CHAIN_ERRORS as e:
            raise ContractError(f"tokenURI({token_id}) failed: {e}") from e

    def owner_of(self, token_id: int) -> str:
        try:
            return self.contract.functions.ownerOf(token_id).call()
        except CHAIN_ERRORS as e:
            raise ContractError(f"ownerOf({token_id}) failed: {e}") from e

    # -- escrituras -------------------------------------------------------

    def _transact(self, function, label: str):
        if self._owner is None:
            raise ContractConfigurationError("CONTRACT_OWNER_PRIVATE_KEY must be set")
        try:
            tx = function.build_transaction({
                "from": self._owner.address,
                "nonce": self.web3.eth.get_transaction_count(self._owner.address),
                "chainId": self.web3.eth.chain_id,
            })
            signed = self.web3.eth.account.sign_transaction(tx, self._owner_key)
            tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=TX_RECEIPT_TIMEOUT)
        except CHAIN_ERRORS as e:
            raise ContractError(f"{label} failed: {e}") from e
        if receipt["status"] != 1:
            raise ContractError(f"{label} reverted: {tx_hash.hex()}")
        return receipt

    def set_token_uri(self, token_id: int, uri: str) -> str:
        logger.info("Updating token URI for token %d to %s", token_id, uri)
        receipt = self._transact(self.contract.functions.setTokenURI(token_id, uri), f"setTokenURI({token_id})")
        tx_hash = Web3.to_hex(receipt["transactionHash"])
        logger.info("Token URI updated, transaction %s", tx_hash)
        return tx_hash

    def mint(self, name: str, signature_hash: str = "") -> MintResult:
        receipt = self._transact(self.contract.functions.mint(name, signature_hash), "mint")
        events = self.contract.events.ManifestoSigned().process_receipt(receipt)
        if not events:
            raise ContractError("mint receipt has no ManifestoSigned event")
        token_id = int(events[0]["args"]["tokenId"])
        return MintResult(token_id=token_id, transaction_hash=Web3.to_hex(receipt["transactionHash"]))
