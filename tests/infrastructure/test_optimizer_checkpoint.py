import json
import tempfile
import unittest
from pathlib import Path

import numpy as np

from treeopt import (
    SGD,
    Adam,
    EuclideanModel,
    InvalidHyperparameterError,
    ParameterTree,
    RiemannSGD,
    ShapeMismatchError,
    optimizer_from_config,
    optimizer_to_config,
)
from treeopt.infrastructure.encoding import ndarray_to_payload, payload_to_ndarray


def _initial_params():
    rng = np.random.default_rng(42)
    return {
        "encoder": {"w": rng.normal(size=(3, 4)), "b": rng.normal(size=4)},
        "heads": [rng.normal(size=2).astype(np.float32), (rng.normal(size=(2, 2)),)],
    }


def _gradients(n, positive=False):
    rng = np.random.default_rng(123)
    template = ParameterTree(_initial_params())

    def draw(x):
        g = rng.normal(size=x.shape)
        return (np.abs(g) if positive else g).astype(x.dtype)

    return [template.map(draw) for _ in range(n)]


class TestResumeFromCheckpoint(unittest.TestCase):
    def _check_resume_is_bit_identical(self, make_optimizer, positive=False):
        grads = _gradients(10, positive=positive)

        # uninterrupted run
        full_model = EuclideanModel(ParameterTree(_initial_params()))
        full_opt = make_optimizer()
        for g in grads:
            full_opt.step(full_model, g)

        # run, checkpoint to disk, restore into fresh objects, continue
        model = EuclideanModel(ParameterTree(_initial_params()))
        opt = make_optimizer()
        for g in grads[:5]:
            opt.step(model, g)

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "ckpt.json"
            path.write_text(
                json.dumps(
                    {
                        "optimizer": optimizer_to_config(opt),
                        "optimizer_state": opt.state_dict(),
                        "params": model.parameters.to_payload(),
                    }
                ),
                encoding="utf-8",
            )
            payload = json.loads(path.read_text(encoding="utf-8"))

        resumed_model = EuclideanModel(ParameterTree.from_payload(payload["params"]))
        resumed_opt = optimizer_from_config(payload["optimizer"])
        resumed_opt.load_state_dict(payload["optimizer_state"])
        for g in grads[5:]:
            resumed_opt.step(resumed_model, g)

        for got, want in zip(
            resumed_model.parameters.leaves(), full_model.parameters.leaves()
        ):
            self.assertEqual(got.dtype, want.dtype)
            self.assertTrue(np.all(np.isfinite(got)))
            self.assertEqual(got.tobytes(), want.tobytes())

    def test_sgd_resume(self):
        self._check_resume_is_bit_identical(
            lambda: SGD(learning_rate=0.05, momentum=0.9, nesterov=True)
        )

    def test_sgd_default_momentum_resume(self):
        self._check_resume_is_bit_identical(
            lambda: SGD(learning_rate=0.05, momentum=0.9)
        )

    def test_adam_resume(self):
        self._check_resume_is_bit_identical(
            lambda: Adam(learning_rate=1e-2, canonical=True)
        )

    def test_adam_default_recurrence_resume(self):
        # non-negative gradients keep the first moment, and hence v, >= 0
        self._check_resume_is_bit_identical(
            lambda: Adam(learning_rate=1e-2), positive=True
        )

    def test_adam_step_counter_restored(self):
        model = EuclideanModel({"w": np.ones(2)})
        opt = Adam()
        for _ in range(3):
            opt.step(model, {"w": np.full(2, 0.25)})

        clone = Adam()
        clone.load_state_dict(json.loads(json.dumps(opt.state_dict())))
        self.assertEqual(clone.state.step, 3)
        self.assertEqual(clone.bias_corrections(), opt.bias_corrections())

    def test_fresh_state_round_trips(self):
        opt = SGD(momentum=0.5)
        clone = SGD(momentum=0.5)
        clone.load_state_dict(opt.state_dict())
        self.assertIsNone(clone.state.velocity)

    def test_stateless_optimizer_round_trips(self):
        opt = RiemannSGD(learning_rate=0.1)
        payload = opt.state_dict()
        self.assertIsNone(payload["state"])
        RiemannSGD(learning_rate=0.1).load_state_dict(payload)

    def test_restored_state_must_match_model(self):
        opt = SGD(momentum=0.9)
        opt.step(EuclideanModel({"w": np.ones(3)}), {"w": np.ones(3)})

        other = SGD(momentum=0.9)
        other.load_state_dict(opt.state_dict())
        with self.assertRaises(ShapeMismatchError):
            other.step(EuclideanModel({"w": np.ones(2)}), {"w": np.ones(2)})


class TestStateDictValidation(unittest.TestCase):
    def test_wrong_format(self):
        opt = Adam()
        payload = opt.state_dict()
        payload["format"] = "other.v0"
        with self.assertRaises(ValueError):
            opt.load_state_dict(payload)

    def test_wrong_optimizer_type(self):
        with self.assertRaises(ValueError):
            SGD().load_state_dict(Adam().state_dict())

    def test_corrupt_array_payload(self):
        payload = ndarray_to_payload(np.arange(4, dtype=np.float64))
        payload["shape"] = [5]
        with self.assertRaises(ValueError):
            payload_to_ndarray(payload)


class TestOptimizerConfig(unittest.TestCase):
    def test_config_round_trip(self):
        for opt in (
            SGD(learning_rate=0.2, momentum=0.7, nesterov=True),
            Adam(learning_rate=3e-4, beta1=0.8, beta2=0.95, epsilon=1e-6, canonical=True),
            RiemannSGD(learning_rate=0.4, scaled=True),
        ):
            with self.subTest(opt=type(opt).__name__):
                node = json.loads(json.dumps(optimizer_to_config(opt)))
                rebuilt = optimizer_from_config(node)
                self.assertIs(type(rebuilt), type(opt))
                self.assertEqual(rebuilt.get_config(), opt.get_config())

    def test_from_config_validates(self):
        with self.assertRaises(InvalidHyperparameterError):
            optimizer_from_config({"type": "Adam", "config": {"beta1": 3.0}})

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            optimizer_from_config({"type": "Lion", "config": {}})

    def test_repr_lists_hyperparameters(self):
        self.assertEqual(
            repr(RiemannSGD(learning_rate=0.5)),
            "RiemannSGD(learning_rate=0.5, scaled=False)",
        )


if __name__ == "__main__":
    unittest.main()
