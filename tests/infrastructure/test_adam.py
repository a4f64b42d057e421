import math
import unittest

import numpy as np

from treeopt import (
    Adam,
    AdamState,
    EuclideanModel,
    InvalidHyperparameterError,
    ParameterTree,
    ShapeMismatchError,
)


def _model(values):
    return EuclideanModel({"w": np.array(values, dtype=np.float64)})


def _grad(values):
    return {"w": np.array(values, dtype=np.float64)}


class TestAdamUpdateRule(unittest.TestCase):
    def test_first_step_golden_value(self):
        """
        Compatibility recurrence: the second moment is built from the freshly
        updated first moment, ``v = beta2 * m + (1 - beta2) * g^2``, so after
        one step with g = 1 it is 0.1009 rather than the textbook 1e-3. The
        often quoted v = 1e-4 matches neither recurrence.
        """
        model = _model([0.0])
        opt = Adam(learning_rate=1e-3, beta1=0.9, beta2=0.999, epsilon=1e-8)

        opt.step(model, _grad([1.0]))

        np.testing.assert_allclose(opt.state.m["w"], [0.1], rtol=1e-12)
        np.testing.assert_allclose(opt.state.v["w"], [0.1009], rtol=1e-12)
        np.testing.assert_allclose(
            model.parameters["w"], [-9.955301176264e-05], rtol=1e-10
        )
        self.assertEqual(opt.state.step, 1)

    def test_canonical_first_step(self):
        lr, b1, b2, eps = 1e-3, 0.9, 0.999, 1e-8
        model = _model([0.0])
        opt = Adam(learning_rate=lr, beta1=b1, beta2=b2, epsilon=eps, canonical=True)

        opt.step(model, _grad([1.0]))

        m, v = 0.1, 1.0 - b2
        step_size = lr * math.sqrt(1.0 - b2) / (1.0 - b1)
        expected = -step_size * m / (math.sqrt(v) + eps)

        np.testing.assert_allclose(opt.state.v["w"], [v], rtol=1e-12)
        np.testing.assert_allclose(model.parameters["w"], [expected], rtol=1e-12)
        # the classic first Adam step moves by roughly lr
        np.testing.assert_allclose(model.parameters["w"], [-lr], rtol=1e-4)

    def test_canonical_matches_reference_loop(self):
        rng = np.random.default_rng(7)
        p0 = {"a": rng.normal(size=(2, 3)), "b": [rng.normal(size=4)]}
        grads = [
            {"a": rng.normal(size=(2, 3)), "b": [rng.normal(size=4)]} for _ in range(6)
        ]
        lr, b1, b2, eps = 1e-2, 0.8, 0.99, 1e-8

        model = EuclideanModel({"a": p0["a"].copy(), "b": [p0["b"][0].copy()]})
        opt = Adam(learning_rate=lr, beta1=b1, beta2=b2, epsilon=eps, canonical=True)
        for g in grads:
            opt.step(model, g)

        for key, pick in (("a", lambda d: d["a"]), ("b", lambda d: d["b"][0])):
            p = pick(p0).copy()
            m = np.zeros_like(p)
            v = np.zeros_like(p)
            for t, g in enumerate(grads, start=1):
                g = pick(g)
                m = b1 * m + (1 - b1) * g
                v = b2 * v + (1 - b2) * g * g
                step_size = lr * math.sqrt(1 - b2**t) / (1 - b1**t)
                p = p - step_size * m / (np.sqrt(v) + eps)
            with self.subTest(leaf=key):
                np.testing.assert_allclose(pick(model.parameters.data), p, rtol=1e-10)

    def test_compatibility_and_canonical_diverge(self):
        compat, textbook = _model([0.5]), _model([0.5])
        opt_compat = Adam()
        opt_textbook = Adam(canonical=True)
        opt_compat.step(compat, _grad([1.0]))
        opt_textbook.step(textbook, _grad([1.0]))
        self.assertFalse(np.allclose(compat.parameters["w"], textbook.parameters["w"]))

    def test_compatibility_recurrence_goes_nan_for_negative_gradient(self):
        """
        With ``m < 0`` the compatibility second moment is negative and its
        square root is NaN. The canonical recurrence stays finite.
        """
        compat, textbook = _model([0.0]), _model([0.0])
        with np.errstate(invalid="ignore"):
            Adam().step(compat, _grad([-1.0]))
        Adam(canonical=True).step(textbook, _grad([-1.0]))

        self.assertTrue(np.isnan(compat.parameters["w"][0]))
        self.assertTrue(np.isfinite(textbook.parameters["w"][0]))
        self.assertGreater(textbook.parameters["w"][0], 0.0)

    def test_decay_is_accepted_but_not_applied(self):
        with self.assertWarns(UserWarning):
            decayed = Adam(decay=0.1, canonical=True)
        plain = Adam(canonical=True)
        a, b = _model([1.0, -1.0]), _model([1.0, -1.0])
        decayed.step(a, _grad([0.3, 0.3]))
        plain.step(b, _grad([0.3, 0.3]))
        np.testing.assert_array_equal(a.parameters["w"], b.parameters["w"])


class TestAdamStepCounter(unittest.TestCase):
    def test_counter_advances_once_per_call_for_multi_leaf_trees(self):
        model = EuclideanModel(
            {"a": np.ones(3), "b": [np.ones((2, 2)), np.ones(1)], "c": np.array(1.0)}
        )
        opt = Adam(canonical=True)
        self.assertEqual(opt.state.step, 0)

        for expected in range(1, 6):
            opt.step(model, model.parameters.zeros_like() + 0.1)
            self.assertEqual(opt.state.step, expected)

    def test_bias_corrections_are_exact(self):
        b1, b2 = 0.9, 0.999
        model = _model([1.0])
        opt = Adam(beta1=b1, beta2=b2, canonical=True)
        for t in range(1, 4):
            opt.step(model, _grad([0.5]))
            self.assertEqual(opt.bias_corrections(), (1 - b1**t, 1 - b2**t))
        self.assertEqual(opt.bias_corrections(10), (1 - b1**10, 1 - b2**10))

    def test_counter_not_advanced_when_update_fails(self):
        opt = Adam()
        opt.step(_model([1.0]), _grad([1.0]))
        with self.assertRaises(ShapeMismatchError):
            opt.step(_model([1.0]), _grad([1.0, 2.0]))
        self.assertEqual(opt.state.step, 1)


class TestAdamState(unittest.TestCase):
    def test_state_starts_empty(self):
        opt = Adam()
        self.assertEqual(opt.state, AdamState(m=None, v=None, step=0))

    def test_moment_shapes_invariant(self):
        rng = np.random.default_rng(1)
        model = EuclideanModel({"x": rng.normal(size=(4, 2)), "y": (rng.normal(size=3),)})
        structure = model.parameters.structure()
        opt = Adam(canonical=True)
        for _ in range(50):
            opt.step(model, model.parameters.map(lambda x: rng.normal(size=x.shape)))
        self.assertEqual(model.parameters.structure(), structure)
        self.assertEqual(opt.state.m.structure(), structure)
        self.assertEqual(opt.state.v.structure(), structure)

    def test_update_is_pure(self):
        opt = Adam()
        params = ParameterTree({"w": np.array([1.0])})
        grad = ParameterTree({"w": np.array([0.5])})
        state = AdamState()

        new_params, new_state = opt.update(params, grad, state)

        np.testing.assert_array_equal(params["w"], [1.0])
        self.assertEqual(state.step, 0)
        self.assertEqual(new_state.step, 1)
        self.assertEqual(opt.state.step, 0)
        self.assertNotEqual(new_params["w"][0], 1.0)


class TestAdamHyperparameters(unittest.TestCase):
    def test_defaults(self):
        opt = Adam()
        self.assertEqual(opt.learning_rate, 1e-3)
        self.assertEqual(opt.beta1, 0.9)
        self.assertEqual(opt.beta2, 0.999)
        self.assertEqual(opt.epsilon, 1e-8)
        self.assertEqual(opt.decay, 0.0)
        self.assertFalse(opt.canonical)

    def test_beta_bounds_are_inclusive(self):
        Adam(beta1=0.0, beta2=0.0)
        Adam(beta1=1.0, beta2=1.0)

    def test_invalid_hyperparams_raise(self):
        for kwargs in (
            {"learning_rate": -1e-3},
            {"beta1": 1.5},
            {"beta1": -0.1},
            {"beta2": 1.0001},
            {"beta2": float("nan")},
            {"decay": -1.0},
        ):
            with self.subTest(**kwargs):
                with self.assertRaises(InvalidHyperparameterError):
                    Adam(**kwargs)

    def test_epsilon_is_not_range_checked(self):
        self.assertEqual(Adam(epsilon=0.0).epsilon, 0.0)

    def test_betas_are_mutable_and_validated(self):
        opt = Adam()
        opt.beta1 = 0.5
        opt.beta2 = 0.75
        self.assertEqual((opt.beta1, opt.beta2), (0.5, 0.75))

        with self.assertRaises(InvalidHyperparameterError):
            opt.beta1 = 2.0
        with self.assertRaises(InvalidHyperparameterError):
            opt.beta2 = -0.5
        self.assertEqual((opt.beta1, opt.beta2), (0.5, 0.75))

    def test_mutated_beta_is_used_by_next_step(self):
        opt = Adam(canonical=True)
        opt.beta1 = 0.5
        model = _model([0.0])
        opt.step(model, _grad([1.0]))
        np.testing.assert_allclose(opt.state.m["w"], [0.5])

    def test_other_hyperparameters_are_read_only(self):
        opt = Adam()
        for name in ("learning_rate", "epsilon", "decay"):
            with self.subTest(name=name):
                with self.assertRaises(AttributeError):
                    setattr(opt, name, 0.5)

    def test_beta1_of_one_fails_at_step(self):
        opt = Adam(beta1=1.0)
        model = _model([1.0])
        with self.assertRaises(ZeroDivisionError):
            opt.step(model, _grad([1.0]))
        np.testing.assert_array_equal(model.parameters["w"], [1.0])
        self.assertEqual(opt.state.step, 0)


if __name__ == "__main__":
    unittest.main()
