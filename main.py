import argparse
import json
import numpy as np
from flyover_engine.camera.flyover_controller import CameraController
from flyover_engine.core.config import Config
from flyover_engine.core.logging import init_logger
from flyover_engine.core.time import FrameScheduler
from flyover_engine.rendering.renderer import RecordingRenderer
from flyover_engine.route.path_sampler import PolylinePathSampler
from flyover_engine.route.terrain import CachedTerrainOracle, ProceduralTerrain
from flyover_engine.utils.geo import destination

TELEMETRY_INTERVAL = 60  # frames


def demo_route(terrain: ProceduralTerrain, start=(8.0, 46.5), length_m: float = 40000.0, step_m: float = 200.0):
    """A winding route over the procedural terrain, riding 2 m above the ground."""
    lng, lat = start
    coordinates = []
    steps = int(length_m / step_m)
    for i in range(steps + 1):
        coordinates.append([lng, lat, terrain.elevation_at(lng, lat) + 2.0])
        bearing = 60.0 + 50.0 * np.sin(i / 25.0)
        lng, lat = destination(lng, lat, step_m, bearing)
    return coordinates


def load_route(path: str):
    with open(path, 'r') as f:
        return json.load(f)


def main():
    """Run the flyover camera headless and log telemetry."""
    parser = argparse.ArgumentParser(
        description='Cycling route flyover camera (headless demo)'
    )
    parser.add_argument(
        '--route',
        default=None,
        help='JSON file with a list of [lng, lat, alt] coordinates (default: generated route)'
    )
    parser.add_argument(
        '--mode',
        default=None,
        help='Camera mode: chase, birds_eye, side_view or cinematic'
    )
    parser.add_argument(
        '--pos',
        type=float,
        default=None,
        help='Start position as progress in [0, 1]'
    )
    parser.add_argument(
        '--km',
        type=float,
        default=None,
        help='Start position in km along the route (overrides --pos)'
    )
    parser.add_argument(
        '--play',
        action='store_true',
        help='Start playing immediately'
    )
    parser.add_argument(
        '--frames',
        type=int,
        default=600,
        help='Number of frames to run (default: 600)'
    )
    parser.add_argument(
        '--config',
        default=None,
        help='JSON configuration file'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging and camera tracing'
    )
    args = parser.parse_args()

    config = Config(args.config)
    if args.debug:
        config.set('engine.debug', True)
    logger = init_logger(level='DEBUG' if args.debug else config.get('engine.log_level', 'INFO'))

    procedural = ProceduralTerrain(seed=7)
    terrain = CachedTerrainOracle(procedural)
    coordinates = load_route(args.route) if args.route else demo_route(procedural)
    sampler = PolylinePathSampler(coordinates)

    renderer = RecordingRenderer()
    controller = CameraController(sampler, renderer, terrain=terrain, config=config)

    if args.mode:
        controller.set_mode(args.mode)
    if args.km is not None and sampler.total_distance_km > 0:
        controller.seek(args.km / sampler.total_distance_km)
    elif args.pos is not None:
        controller.seek(args.pos)
    if args.play:
        controller.play()

    def on_frame(dt: float):
        telemetry = controller.tick(dt)
        if scheduler.frame_count % TELEMETRY_INTERVAL == 0:
            logger.info(f"{telemetry.distance_km:7.2f} km ({telemetry.progress * 100:5.1f}%) "
                        f"mode={telemetry.mode.value} phase={telemetry.phase.value} "
                        f"terrain_adjusted={telemetry.terrain_adjusted} playing={telemetry.playing}")

    scheduler = FrameScheduler(
        on_frame,
        max_frame_delta=config.get('engine.max_frame_delta', 0.25),
        frame_rate=config.get('engine.frame_rate', 60),
    )

    try:
        scheduler.run(max_frames=args.frames)
    except KeyboardInterrupt:
        scheduler.stop()
        logger.info("Interrupted")

    pose = renderer.last_pose
    if pose is not None:
        logger.info(f"Final camera: lng={pose.lng:.5f} lat={pose.lat:.5f} alt={pose.alt:.0f} m "
                    f"bearing={pose.bearing:.1f} pitch={pose.pitch:.1f}")


if __name__ == "__main__":
    main()
