import numpy as np
import pytest

from minibatch_mle.optimizers import Adam, BFGS, get_optimizer


class _Quadratic:
    """Minimal objective: ||x - c||^2, no predictions."""

    def __init__(self, c):
        self.c = np.asarray(c, dtype=float)
        self.n_calls = 0

    def value_and_grad(self, x):
        self.n_calls += 1
        r = np.asarray(x, dtype=float) - self.c
        return float(r @ r), 2.0 * r, []

    def __call__(self, x):
        loss, _, preds = self.value_and_grad(x)
        return loss, preds


class _Recorder:
    """Callback recording its calls; stops after *stop_at* calls."""

    def __init__(self, stop_at=None):
        self.stop_at = stop_at
        self.calls = []

    def __call__(self, x, loss, preds):
        self.calls.append((np.array(x), loss))
        return self.stop_at is not None and len(self.calls) >= self.stop_at


class TestAdam:

    def test_converges_on_quadratic(self):
        obj = _Quadratic([1.0, -2.0])
        x = Adam(lr=0.05).minimize(obj, np.zeros(2), _Recorder(), maxiters=2000)
        np.testing.assert_allclose(x, [1.0, -2.0], atol=1e-2)

    def test_one_callback_per_iteration(self):
        cb = _Recorder()
        Adam(lr=0.01).minimize(_Quadratic([1.0]), np.zeros(1), cb, maxiters=17)
        assert len(cb.calls) == 17

    def test_callback_sees_loss_before_update(self):
        cb = _Recorder()
        Adam(lr=0.01).minimize(_Quadratic([1.0]), np.zeros(1), cb, maxiters=3)
        assert cb.calls[0][1] == pytest.approx(1.0)
        losses = [loss for _, loss in cb.calls]
        assert losses == sorted(losses, reverse=True)

    def test_early_stop_returns_current_point(self):
        cb = _Recorder(stop_at=3)
        x = Adam(lr=0.01).minimize(_Quadratic([1.0]), np.zeros(1), cb, maxiters=100)
        assert len(cb.calls) == 3
        np.testing.assert_array_equal(x, cb.calls[-1][0])

    def test_infinite_loss_does_not_raise(self):
        class _Broken(_Quadratic):
            def value_and_grad(self, x):
                return np.inf, np.zeros_like(np.asarray(x, dtype=float)), []

        cb = _Recorder()
        x = Adam().minimize(_Broken([0.0]), np.ones(1), cb, maxiters=5)
        assert len(cb.calls) == 5
        assert all(loss == np.inf for _, loss in cb.calls)
        np.testing.assert_array_equal(x, [1.0])

    def test_non_positive_learning_rate_raises(self):
        with pytest.raises(ValueError, match="Learning rate"):
            Adam(lr=0.0)


class TestBFGS:

    def test_converges_on_quadratic(self):
        obj = _Quadratic([1.0, -2.0, 3.0])
        x = BFGS(initial_stepnorm=0.01).minimize(obj, np.zeros(3), _Recorder(), maxiters=200)
        np.testing.assert_allclose(x, [1.0, -2.0, 3.0], atol=1e-6)

    def test_callback_count_bounded_by_maxiters(self):
        cb = _Recorder()
        BFGS().minimize(_Quadratic([5.0, 5.0]), np.zeros(2), cb, maxiters=2)
        assert 1 <= len(cb.calls) <= 2

    def test_early_stop(self):
        cb = _Recorder(stop_at=1)
        x = BFGS().minimize(_Quadratic([5.0, 5.0]), np.zeros(2), cb, maxiters=100)
        assert len(cb.calls) == 1
        np.testing.assert_allclose(x, cb.calls[0][0])

    def test_without_initial_stepnorm(self):
        obj = _Quadratic([1.0, 2.0])
        x = BFGS(initial_stepnorm=None).minimize(obj, np.zeros(2), _Recorder(), maxiters=100)
        np.testing.assert_allclose(x, [1.0, 2.0], atol=1e-6)


class TestGetOptimizer:

    def test_by_name(self):
        assert isinstance(get_optimizer("adam", lr=0.1), Adam)
        assert isinstance(get_optimizer("BFGS"), BFGS)

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown optimizer"):
            get_optimizer("lbfgs")
