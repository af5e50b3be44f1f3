# flyover_engine/rendering/panda_backend.py

import math
from typing import Optional
from flyover_engine.camera.camera_pose import CameraPose, PathPoint
from flyover_engine.rendering.renderer import Renderer, ViewRequest
from flyover_engine.utils.geo import local_offset_meters, meters_per_degree, normalize_bearing
from flyover_engine.core.logging import get_logger

logger = get_logger()

# Ground meters per pixel at zoom 0 on the equator (web mercator)
_METERS_PER_PIXEL_Z0 = 156543.03
_VIEWPORT_PIXELS = 512.0


class PandaCameraRenderer(Renderer):
    """
    Drives a Panda3D camera NodePath.

    Geographic poses are converted to local metres around an origin:
    +X east, +Y north, +Z up, which is Panda3D's Z-up frame. Panda heading
    turns counter-clockwise from +Y, so heading = -bearing.
    """

    def __init__(self, origin: PathPoint, camera=None):
        self.origin = origin
        if camera is None:
            camera = self._create_camera_node()
        self.camera = camera

    @staticmethod
    def _create_camera_node():
        from panda3d.core import NodePath
        return NodePath('flyover_camera')

    def to_local(self, lng: float, lat: float, alt: float):
        east, north = local_offset_meters(lng, lat, self.origin.lng, self.origin.lat)
        return east, north, alt - self.origin.alt

    def to_geo(self, x: float, y: float, z: float):
        m_lng, m_lat = meters_per_degree(self.origin.lat)
        return self.origin.lng + x / m_lng, self.origin.lat + y / m_lat, z + self.origin.alt

    def set_pose(self, pose: CameraPose, look_at: PathPoint):
        x, y, z = self.to_local(pose.lng, pose.lat, pose.alt)
        self.camera.setPos(x, y, z)
        self.camera.setHpr(-pose.bearing, pose.pitch, 0.0)

    def set_view(self, view: ViewRequest):
        from panda3d.core import Point3

        center_lng, center_lat = view.center
        # Viewing distance that shows roughly the same ground as a map at this zoom
        meters_per_pixel = _METERS_PER_PIXEL_Z0 * math.cos(math.radians(center_lat)) / (2.0 ** view.zoom)
        distance = meters_per_pixel * _VIEWPORT_PIXELS

        elevation = math.radians(90.0 - view.pitch)
        horizontal = distance * math.cos(elevation)
        up = distance * math.sin(elevation)

        cx, cy, cz = self.to_local(center_lng, center_lat, self.origin.alt)
        back = math.radians(view.bearing + 180.0)
        self.camera.setPos(cx + horizontal * math.sin(back), cy + horizontal * math.cos(back), cz + up)
        self.camera.lookAt(Point3(cx, cy, cz))

    def current_pose(self) -> Optional[CameraPose]:
        pos = self.camera.getPos()
        hpr = self.camera.getHpr()
        lng, lat, alt = self.to_geo(pos[0], pos[1], pos[2])
        return CameraPose(lng=lng, lat=lat, alt=alt, bearing=normalize_bearing(-hpr[0]), pitch=float(hpr[1]))
