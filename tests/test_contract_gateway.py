import pytest
from web3 import Web3

from modules.tokens.errors import ContractConfigurationError, ContractError
from modules.tokens.services.contract_gateway import ContractGateway, MintResult

CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
SIGNER = "0x1234567890abcdef1234567890abcdef12345678"
TX_HASH = bytes.fromhex("ab" * 32)


def signed_log(web3, token_id, name="Ada", timestamp=1735689600):
    return {
        "address": CONTRACT,
        "topics": [
            Web3.keccak(text="ManifestoSigned(address,uint256,string,uint256)"),
            bytes(12) + bytes.fromhex(SIGNER[2:]),
            token_id.to_bytes(32, "big"),
        ],
        "data": web3.codec.encode(["string", "uint256"], [name, timestamp]),
        "logIndex": 0,
        "transactionIndex": 0,
        "transactionHash": TX_HASH,
        "blockHash": bytes(32),
        "blockNumber": 1,
    }


@pytest.fixture
def gateway():
    return ContractGateway(Web3(), CONTRACT)


def test_mint_reads_token_id_from_event(gateway, monkeypatch):
    calls = []

    def transact(function, label):
        calls.append((function.fn_name, function.args, label))
        return {"status": 1, "transactionHash": TX_HASH, "logs": [signed_log(gateway.web3, 7)]}

    monkeypatch.setattr(gateway, "_transact", transact)
    result = gateway.mint("Ada", "0xabc123")

    assert result == MintResult(token_id=7, transaction_hash="0x" + "ab" * 32)
    assert calls == [("mint", ("Ada", "0xabc123"), "mint")]


def test_mint_without_event_is_an_error(gateway, monkeypatch):
    monkeypatch.setattr(gateway, "_transact", lambda function, label: {
        "status": 1, "transactionHash": TX_HASH, "logs": [],
    })
    with pytest.raises(ContractError, match="ManifestoSigned"):
        gateway.mint("Ada")


def test_writes_need_owner_key(gateway):
    with pytest.raises(ContractConfigurationError):
        gateway.mint("Ada")
    with pytest.raises(ContractConfigurationError):
        gateway.set_token_uri(7, "ipfs://bafy/metadata.json")
