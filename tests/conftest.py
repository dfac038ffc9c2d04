import pytest

from fedledger.contract import FedAvgContract
from fedledger.core.types import Event
from fedledger.identity import ClientIdentity, Role
from fedledger.ledger import InMemoryLedger

MSP_ID = "Org1MSP"


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def contract(ledger: InMemoryLedger) -> FedAvgContract:
    return FedAvgContract(ledger)


@pytest.fixture
def events(ledger: InMemoryLedger) -> list[Event]:
    """Events published by the ledger, in commit order."""
    received: list[Event] = []
    ledger.notifier.subscribe(received.append)
    return received


@pytest.fixture
def admin() -> ClientIdentity:
    return ClientIdentity.with_roles(
        "admin", Role.FL_ADMIN, msp_id=MSP_ID, enrollment_id="admin"
    )


@pytest.fixture
def trainer_a() -> ClientIdentity:
    return ClientIdentity.with_roles(
        "x509::CN=trainerA", Role.TRAINER, msp_id=MSP_ID, enrollment_id="A"
    )


@pytest.fixture
def trainer_b() -> ClientIdentity:
    return ClientIdentity.with_roles(
        "x509::CN=trainerB", Role.TRAINER, msp_id=MSP_ID, enrollment_id="B"
    )


@pytest.fixture
def aggregator() -> ClientIdentity:
    return ClientIdentity.with_roles(
        "x509::CN=aggregator",
        Role.LEAD_AGGREGATOR,
        msp_id=MSP_ID,
        enrollment_id="aggregator",
    )


@pytest.fixture
def outsider() -> ClientIdentity:
    return ClientIdentity(id="x509::CN=outsider", msp_id="Org2MSP")


@pytest.fixture
def started_model(contract: FedAvgContract, admin: ClientIdentity) -> str:
    """Model m1 with two clients per round and two rounds, started."""
    contract.create_model_metadata(admin, "m1", "mnist", 2, 2)
    contract.start_training(admin, "m1")
    return "m1"
