import numpy as np
import minibatch_mle as mbm

np.set_printoptions(suppress=True, precision=2, floatmode="fixed")

cfg = mbm.LV
sim = mbm.ODESimulator(cfg.build_ode())

num_meas = [50, 100, 200]
group_sizes = [[51, 11], [101, 21, 11], [201, 41, 21]]

for n_m, gs in zip(num_meas, group_sizes):
    print(f"#Measurement: {n_m}, group sizes: {gs}")
    t_grid = np.linspace(0.0, 10.0, n_m)

    X_true, X_meas = mbm.generate_data(
        sim, t_grid, cfg.x0, cfg.true_p, noise_std=0.01
    )

    results = mbm.estimate(
        sim,
        t_grid,
        X_meas,
        cfg.p_init,
        group_sizes=gs,
        p_true=cfg.true_p,
    )
    for res in results:
        print(res)
    print(results[-1].p_trained, end="\n\n")
