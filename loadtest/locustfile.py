# locustfile.py
import math
import os
import random

from locust import HttpUser, task, between

# ------------------- Config -------------------
BASE_LAT = float(os.getenv("BASE_LAT", 39.7392))        # downtown Denver
BASE_LNG = float(os.getenv("BASE_LNG", -104.9903))
BOUND_BOX_KM = float(os.getenv("BOUND_BOX_KM", 8))      # clicks land within this box
HOTSPOT_PROB = float(os.getenv("HOTSPOT_PROB", 0.3))

# Sample locations; clicking right on them exercises the zero-distance path
HOTSPOTS = [
    (39.7316, -104.9739),  # King Soopers - Speer
    (39.7527, -105.0008),  # Union Station
    (39.7377, -104.9882),  # Central Library
    (39.7448, -104.9903),  # 16th & California
]


# ------------------- Helpers -------------------
def km_to_deg_lat(km: float) -> float:
    return km / 110.574


def km_to_deg_lng(km: float, lat: float) -> float:
    return km / (111.320 * max(0.01, abs(math.cos(math.radians(lat)))))


LAT_SPAN = km_to_deg_lat(BOUND_BOX_KM)
LNG_SPAN = km_to_deg_lng(BOUND_BOX_KM, BASE_LAT)


def pick_point():
    if random.random() < HOTSPOT_PROB:
        return random.choice(HOTSPOTS)
    return (
        BASE_LAT + random.uniform(-LAT_SPAN, LAT_SPAN),
        BASE_LNG + random.uniform(-LNG_SPAN, LNG_SPAN),
    )


class MapClickUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        r = self.client.get("/categories", name="GET /categories")
        if r.status_code >= 300:
            print(f"[INIT][ERR] status={r.status_code} body={r.text[:160]}")

    @task(10)
    def click_map(self):
        lat, lng = pick_point()
        with self.client.get(
            "/nearby",
            params={"lat": lat, "lng": lng},
            name="GET /nearby",
            catch_response=True,
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Unexpected status {resp.status_code}")
                return
            body = resp.json()
            shown = sum(c["match_count"] for c in body["categories"].values())
            if shown != body["total"]:
                resp.failure(f"total {body['total']} != sum of match counts {shown}")

    @task(1)
    def status(self):
        self.client.get("/status", name="GET /status")
