from pathlib import Path

import folium

STYLES = {
    "branching": {"color": "#e31a1c", "radius": 7},
    "crosswalk": {"color": "#ff7f00", "radius": 5},
    "intersection": {"color": "#1f78b4", "radius": 4},
    "user": {"color": "#33a02c", "radius": 6},
}


def _style_for(point) -> dict:
    if point.branching:
        return STYLES["branching"]
    if point.crosswalk:
        return STYLES["crosswalk"]
    return STYLES["intersection"]


# Purpose: Render classified points (and optionally the user) on a folium map.
# Inputs:
# - points (list[ClassifiedPoint]): Detection output.
# - user ((lon, lat) | None): User position used as the map center.
# Outputs:
# - folium.Map: Map with one CircleMarker per point.
def build_map(points, user=None) -> folium.Map:
    if user is not None:
        center = [user[1], user[0]]
    elif points:
        center = [sum(p.lat for p in points) / len(points), sum(p.lon for p in points) / len(points)]
    else:
        center = [0.0, 0.0]
    m = folium.Map(location=center, zoom_start=17, tiles="CartoDB positron")

    for p in points:
        style = _style_for(p)
        popup = f"Type: {p.type} | branching={p.branching} | signalized={p.signalized} | sources={list(p.sources)}"
        folium.CircleMarker(
            location=[p.lat, p.lon],
            radius=style["radius"],
            color=style["color"],
            fill=True,
            fill_opacity=0.7,
            popup=popup,
        ).add_to(m)

    if user is not None:
        folium.CircleMarker(
            location=[user[1], user[0]],
            radius=STYLES["user"]["radius"],
            color=STYLES["user"]["color"],
            fill=True,
            fill_opacity=0.9,
            popup="You are here",
        ).add_to(m)
    return m


def save_map(points, path, user=None) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    build_map(points, user=user).save(str(path))
    return path
