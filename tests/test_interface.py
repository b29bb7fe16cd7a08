import matplotlib.pyplot as plt
import numpy as np

from minibatch_mle import interface
from minibatch_mle.plotting import plot_convergence
from minibatch_mle.ranges import get_ranges
from minibatch_mle.simulator import ODESimulator
from minibatch_mle.utils import Timer, printgreen, printyellow, timed


class TestProblems:

    def test_problem_dimensions(self):
        for build, n_x, n_p in [
            (interface.lv_problem, 2, 2),
            (interface.lorenz_problem, 3, 3),
            (interface.pyridine_problem, 7, 11),
        ]:
            sim = ODESimulator(build())
            assert (sim.n_x, sim.n_p) == (n_x, n_p)

    def test_generate_data(self):
        cfg = interface.LV
        sim = ODESimulator(cfg.build_ode())
        t_grid = np.linspace(0.0, 1.0, 11)
        clean, noisy = interface.generate_data(sim, t_grid, cfg.x0, cfg.true_p, noise_std=0.0)
        assert clean.shape == (2, 11)
        np.testing.assert_allclose(clean[:, 0], cfg.x0)
        np.testing.assert_array_equal(clean, noisy)

    def test_generate_data_is_seeded(self):
        cfg = interface.LV
        sim = ODESimulator(cfg.build_ode())
        t_grid = np.linspace(0.0, 1.0, 5)
        _, a = interface.generate_data(sim, t_grid, cfg.x0, cfg.true_p, seed=1)
        _, b = interface.generate_data(sim, t_grid, cfg.x0, cfg.true_p, seed=1)
        np.testing.assert_array_equal(a, b)

    def test_estimate(self, capsys):
        cfg = interface.LV
        sim = ODESimulator(cfg.build_ode())
        t_grid = np.linspace(0.0, 2.0, 11)
        _, meas = interface.generate_data(sim, t_grid, cfg.x0, cfg.true_p)
        results = interface.estimate(
            sim, t_grid, meas, cfg.p_init, group_sizes=[12], p_true=cfg.true_p, maxiters=(3, 2)
        )
        assert len(results) == 1
        assert results[0].ranges == [range(0, 11)]
        assert len(results[0].param_errors) == len(results[0].losses)
        assert "[estimate] took" in capsys.readouterr().out


class TestPlotConvergence:

    def test_with_ground_truth(self):
        data = np.vstack([np.linspace(1, 2, 10), np.linspace(2, 1, 10)])
        tsteps = np.linspace(0, 1, 10)
        ranges = get_ranges(4, 10)
        pred = [data[:, r.start:r.stop] for r in ranges]
        fig = plot_convergence(
            [1.0, 0.5, 0.1], pred, data, ranges, tsteps,
            p_true=np.array([1.0, 2.0]), p_labs=["a", "b"],
            param_errors=[0.3, 0.2, 0.1], p_trained=np.array([0.9, 2.1]),
        )
        assert len(fig.axes) == 3
        plt.close(fig)

    def test_failed_segment_is_skipped(self):
        data = np.ones((1, 10))
        tsteps = np.linspace(0, 1, 10)
        ranges = get_ranges(4, 10)
        pred = [data[:, r.start:r.stop] for r in ranges]
        pred[1] = np.empty((1, 0))
        fig = plot_convergence([1.0], pred, data, ranges, tsteps)
        assert len(fig.axes) == 2
        plt.close(fig)


class TestUtils:

    def test_colour_helpers(self, capsys):
        printyellow("careful")
        printgreen("done")
        out = capsys.readouterr().out
        assert "\033[33mcareful\033[0m" in out
        assert "\033[32mdone\033[0m" in out

    def test_timer(self):
        messages = []
        with Timer("block", logger=messages.append) as t:
            pass
        assert t.elapsed >= 0.0
        assert messages[0].startswith("[block] took")

    def test_timed(self, capsys):
        @timed
        def add(a, b):
            return a + b

        assert add(1, 2) == 3
        assert "add] took" in capsys.readouterr().out
