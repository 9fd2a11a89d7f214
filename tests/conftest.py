import pytest
from PIL import Image, ImageDraw
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base
from modules.artwork.models.render_request import RenderRequest
from modules.artwork.services.assets import AssetRegistry
from modules.reveal.models.publication import ArtworkPublication  # noqa: F401
from modules.zine.models.zine_request import ZineRequest  # noqa: F401

TEST_ICONS = tuple(f"images/icon{i}.png" for i in range(14))

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def write_asset_pack(root):
    images = root / "images"
    images.mkdir(parents=True)
    Image.new("RGB", (170, 220), (238, 230, 214)).save(images / "paperbackground.jpg")

    text = Image.new("RGBA", (143, 178), (0, 0, 0, 0))
    ImageDraw.Draw(text).rectangle([10, 10, 130, 30], fill=(0, 0, 0, 255))
    text.save(images / "manifesto-text.png")

    for i, relative in enumerate(TEST_ICONS):
        icon = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
        ImageDraw.Draw(icon).ellipse([4, 4, 60, 60], fill=((i * 37) % 256, 90, 200, 255))
        icon.save(root / relative)
    return root


@pytest.fixture
def asset_root(tmp_path):
    return write_asset_pack(tmp_path / "assets")


@pytest.fixture
def asset_registry(asset_root):
    return AssetRegistry(asset_root, icon_files=TEST_ICONS)


@pytest.fixture
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def make_request(**overrides) -> RenderRequest:
    fields = dict(
        display_name="Test User",
        date_label="January 1, 2025",
        signature_text="0xabc123",
        signer_ordinal=42,
    )
    fields.update(overrides)
    return RenderRequest(**fields)
