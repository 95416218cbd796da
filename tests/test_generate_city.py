import json

import pytest

import Generate.generate_city as gc


PARAMS = {
    "city": {"width": 200, "height": 150},
    "image": {"width": 80, "height": 60},
    "roads": {
        "density": {
            "x": {"distribution": "uniform", "min": 0.005, "max": 0.02},
            "y": {"distribution": "normal", "min": 0.005, "max": 0.02},
        },
        "breadth": {"distribution": "uniform", "min": 5, "max": 10},
    },
}


def test_offline_generation_writes_outputs(tmp_path):
    params_path = tmp_path / "params.json"
    params_path.write_text(json.dumps(PARAMS))
    out_prefix = tmp_path / "out" / "city"
    city = gc.main([
        "--params_json", str(params_path),
        "--out_prefix", str(out_prefix),
        "--offline",
        "--seed", "7",
        "--svg",
    ])
    assert (tmp_path / "out" / "city.jpg").read_bytes()[:2] == b"\xff\xd8"
    assert (tmp_path / "out" / "city.svg").exists()
    layout = json.loads((tmp_path / "out" / "city.json").read_text())
    assert layout["size"] == {"width": 200, "height": 150}
    assert len(layout["blocks"]) == len(city.blocks)
    assert len(layout["roads"]) == len(city.roads)


def test_same_seed_same_city(tmp_path):
    params_path = tmp_path / "params.json"
    params_path.write_text(json.dumps(PARAMS))
    a = gc.main(["--params_json", str(params_path), "--out_prefix", str(tmp_path / "a"), "--offline", "--seed", "3", "--workers", "1"])
    b = gc.main(["--params_json", str(params_path), "--out_prefix", str(tmp_path / "b"), "--offline", "--seed", "3", "--workers", "1"])
    assert a.to_dict() == b.to_dict()


def test_invalid_params_exit_nonzero(tmp_path):
    params_path = tmp_path / "params.json"
    params_path.write_text(json.dumps({"city": {"width": -1}}))
    with pytest.raises(SystemExit) as info:
        gc.main(["--params_json", str(params_path), "--offline"])
    assert info.value.code == 1


def test_bad_distribution_exits_nonzero(tmp_path):
    params_path = tmp_path / "params.json"
    params_path.write_text(json.dumps({"alleys": {"breadth": {"distribution": "uniform", "min": 9, "max": 1}}}))
    with pytest.raises(SystemExit) as info:
        gc.main(["--params_json", str(params_path), "--offline", "--out_prefix", str(tmp_path / "x")])
    assert info.value.code == 1
