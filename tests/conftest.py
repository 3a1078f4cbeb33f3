"""Shared pytest fixtures for rigidexport tests."""

from pathlib import Path

import cv2
import numpy as np
import pytest

from rigidexport.core.model import MaterialRef, Model, Submesh, TextureRole, Vertex


def write_rgba_png(path: Path, rgba: np.ndarray) -> Path:
    """Write an (H, W, 4) RGBA uint8 array as PNG via OpenCV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(path), cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA))
    return path


def read_rgba_png(path: Path) -> np.ndarray:
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    assert img is not None, f"could not read {path}"
    return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)


def make_triangle(name: str = "Mesh_0", material: MaterialRef | None = None) -> Submesh:
    vertices = [
        Vertex((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0)),
        Vertex((1.0, 0.0, 0.0), (0.0, 0.0, 1.0), (1.0, 0.0)),
        Vertex((0.0, 1.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0)),
    ]
    return Submesh.from_vertices(name, vertices, [0, 1, 2], material or MaterialRef("plain"))


def make_quad(name: str, material: MaterialRef, x: float = 0.0) -> Submesh:
    vertices = [
        Vertex((x, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0)),
        Vertex((x + 1, 0.0, 0.0), (0.0, 0.0, 1.0), (1.0, 0.0)),
        Vertex((x + 1, 1.0, 0.0), (0.0, 0.0, 1.0), (1.0, 1.0)),
        Vertex((x, 1.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0)),
    ]
    return Submesh.from_vertices(name, vertices, [0, 1, 2, 0, 2, 3], material)


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Create a temporary data root with standard directory structure."""
    for subdir in ["raw", "interim/s00_inspect_model", "processed"]:
        (tmp_path / subdir).mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def triangle_model() -> Model:
    """One submesh, three vertices, one triangle, material without textures."""
    return Model(name="triangle", lods=[[make_triangle()]])


@pytest.fixture
def texture_dir(data_root: Path) -> Path:
    """Normal, diffuse and mask maps (8x8) in raw/textures."""
    tex_dir = data_root / "raw" / "textures"
    rng = np.random.default_rng(7)

    normal = np.zeros((8, 8, 4), dtype=np.uint8)
    normal[..., 0] = 128
    normal[..., 1] = rng.integers(0, 256, (8, 8))
    normal[..., 2] = 255
    normal[..., 3] = 255
    write_rgba_png(tex_dir / "body_n.png", normal)

    diffuse = rng.integers(0, 256, (8, 8, 4), dtype=np.uint8)
    diffuse[..., 3] = 255
    write_rgba_png(tex_dir / "body_d.png", diffuse)

    mask = np.zeros((8, 8, 4), dtype=np.uint8)
    mask[:, :4] = 255  # left half white, right half black
    mask[..., 3] = 255
    write_rgba_png(tex_dir / "body_m.png", mask)
    return tex_dir


@pytest.fixture
def textured_model(texture_dir: Path) -> Model:
    """Two materials: 'body' with normal/diffuse/mask, 'trim' with diffuse only."""
    body = MaterialRef("body", {
        TextureRole.NORMAL: str(texture_dir / "body_n.png"),
        TextureRole.DIFFUSE: str(texture_dir / "body_d.png"),
        TextureRole.MASK: str(texture_dir / "body_m.png"),
    })
    trim = MaterialRef("trim", {TextureRole.BASE_COLOR: str(texture_dir / "body_d.png")})
    return Model(name="unit", lods=[[
        make_quad("body_0", body),
        make_triangle("trim_0", trim),
        make_quad("body_1", body, x=2.0),
    ]])


@pytest.fixture
def sample_obj(data_root: Path, texture_dir: Path) -> Path:
    """A two-object OBJ plus a materials manifest pointing at texture_dir."""
    obj_path = data_root / "raw" / "crate.obj"
    obj_path.write_text(
        "mtllib crate.mtl\n"
        "o lid\n"
        "v 0 0 0\nv 1 0 0\nv 0 1 0\n"
        "vt 0 0\nvt 1 0\nvt 0 1\n"
        "vn 0 0 1\nvn 0 0 1\nvn 0 0 1\n"
        "usemtl wood\n"
        "f 1/1/1 2/2/2 3/3/3\n"
        "o base\n"
        "v 0 0 1\nv 1 0 1\nv 0 1 1\n"
        "vt 0 0\nvt 1 0\nvt 0 1\n"
        "vn 0 0 1\nvn 0 0 1\nvn 0 0 1\n"
        "usemtl metal\n"
        "f 4/4/4 5/5/5 6/6/6\n",
        encoding="utf-8",
    )
    (data_root / "raw" / "crate.mtl").write_text(
        "newmtl wood\nKd 0.5 0.3 0.1\n\nnewmtl metal\nKd 0.6 0.6 0.6\n",
        encoding="utf-8",
    )
    (data_root / "raw" / "crate.materials.yaml").write_text(
        "materials:\n"
        "  wood:\n"
        "    diffuse: textures/body_d.png\n"
        "    normal: textures/body_n.png\n"
        "  metal:\n"
        "    base_color: textures/body_d.png\n",
        encoding="utf-8",
    )
    return obj_path
