# provider_arcgis.py
# ArcGIS feature-service query endpoints (all layers, WGS84 output).

from typing import Iterable, List

from gateway import Endpoint


def query_endpoint(
    layer_url: str,
    out_format: str = "json",
    where: str = "1=1",
    out_fields: str = "*",
    return_centroid: bool = False,
) -> Endpoint:
    params = {
        "where": where,
        "outFields": out_fields,
        "returnGeometry": "true",
        "outSR": "4326",
        "f": out_format,
    }
    if return_centroid:
        params["returnCentroid"] = "true"
    return Endpoint(url=f"{layer_url.rstrip('/')}/query", params=params)


def query_candidates(layer_urls: Iterable[str], **kwargs) -> List[Endpoint]:
    return [query_endpoint(url, **kwargs) for url in layer_urls]
