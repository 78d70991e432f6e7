# main.py
"""
Main entry point for the Flux flow-field visualization.

This script orchestrates the entire application lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Builds the noise field, particle system, simulation and window.
4. Runs the frame loop until the window closes or max_steps is reached.
5. Handles clean shutdown.
"""
import logging
import sys
from utils import setup_logging, load_config, build_simulation_config
import cProfile
import pstats
import io
import numpy as np


def main(config_path: str = 'config.json'):
    """
    The main function to run the visualization.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Flux Flow Field Starting ---")

    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    try:
        sim_config = build_simulation_config(config)
    except ValueError:
        logging.critical("Invalid simulation parameters. Aborting.")
        return

    from noise_field import NoiseField
    from particle import ParticleSystem
    from simulation import Simulation
    from render_loop import RenderLoop
    from visualization import Visualizer

    # --- Component Initialization ---
    # A single seed (or None for fresh entropy) feeds both random sources.
    seed_sequence = np.random.SeedSequence(sim_config.seed)
    noise_seed, particle_seed = seed_sequence.spawn(2)

    # 1. The visualizer owns the window and therefore the surface size.
    visualizer = Visualizer(sim_config, fullscreen=vis_params.get('fullscreen', False))

    # 2. Core components
    noise_field = NoiseField(np.random.default_rng(noise_seed))
    particles = ParticleSystem(np.random.default_rng(particle_seed))
    sim = Simulation(particles, noise_field)
    loop = RenderLoop(visualizer.surface, visualizer.scheduler, sim, sim_config)
    visualizer.attach(loop)

    # --- Profiler Setup ---
    profiler = cProfile.Profile()

    log_throttle = run_params.get('log_throttle_steps', 300)
    max_steps = run_params.get('max_steps')  # None runs until the window closes

    running = True
    last_logged = 0
    profiler.enable()
    loop.start()
    while running:
        running = visualizer.run_frame()
        step_num = loop.frame_count

        # Hot loops must throttle logs
        if step_num - last_logged >= log_throttle:
            last_logged = step_num
            logging.info(f"Frame {step_num}, {len(particles)} particles")
            logging.debug(f"Frame {step_num} | Average Speed: {sim.mean_speed():.4f}")

        if max_steps is not None and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping.")
            running = False
    profiler.disable()

    visualizer.close()
    logging.info("Frame loop finished.")

    if run_params.get('profile', True):
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Flux Flow Field Shutting Down ---")


if __name__ == "__main__":
    main(*sys.argv[1:2])
