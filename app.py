"""
Streamlit Web Interface for RouteReady

Single-page delivery route planner: upload or type addresses, choose a
depot, let the optimization service order the stops, then work through
the route while tracking progress.
"""

import logging
import traceback
from html import escape

import pandas as pd
import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import project modules
from routeready.controller.view_controller import SessionState, ViewController
from routeready.models.route_config import AppState, RouteConfig
from routeready.output.snapshot_csv import SnapshotCSVGenerator
from routeready.solver.gemini_client import GeminiClient
from routeready.solver.route_optimizer import RouteOptimizer
from routeready.utils.navigation_links import (
    embed_target,
    embedded_map_iframe,
    stop_directions_link,
)
from routeready.utils.settings_parser import SettingsParser, SettingsParserError
from routeready.models.settings import AppSettings
from routeready.visualization.map_visualizer import MapVisualizer
from routeready.visualization.route_projection import RouteProjectionRenderer

# Configure logger
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Page configuration
st.set_page_config(
    page_title="RouteReady",
    page_icon="🚚",
    layout="centered",
    initial_sidebar_state="collapsed",
)


# Custom CSS for better styling
st.markdown("""
    <style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #f59e0b;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        font-size: 1.1rem;
        color: #94a3b8;
        margin-bottom: 2rem;
    }
    .next-stop {
        font-size: 1.8rem;
        font-weight: 900;
        line-height: 1.2;
        margin: 0.5rem 0 1rem 0;
    }
    .stop-label {
        font-size: 0.65rem;
        font-weight: 900;
        letter-spacing: 0.3em;
        color: #64748b;
        text-transform: uppercase;
    }
    .stop-done {
        text-decoration: line-through;
        color: #64748b;
    }
    .mini-map {
        background-color: #0f172a;
        border-radius: 1.5rem;
        padding: 0.5rem;
    }
    </style>
""", unsafe_allow_html=True)


def load_settings() -> AppSettings:
    """Load settings from conf.yaml and the environment"""
    try:
        return SettingsParser().parse()
    except SettingsParserError as e:
        st.warning(f"⚠️ Could not load settings, using defaults: {str(e)}")
        return AppSettings()


def initialize_session_state():
    """Initialize session state variables"""
    if 'settings' not in st.session_state:
        st.session_state.settings = load_settings()
    if 'controller' not in st.session_state:
        settings = st.session_state.settings
        optimizer = RouteOptimizer(GeminiClient(settings.optimizer))
        state = SessionState(
            config=RouteConfig(
                depot="",
                vehicle_count=settings.default_vehicle_count,
                return_to_start=settings.default_return_to_start,
            )
        )
        st.session_state.controller = ViewController(optimizer, state=state)
    if 'uploader_key' not in st.session_state:
        st.session_state.uploader_key = 0  # Bumped to clear the uploader after each file
    if 'manual_input' not in st.session_state:
        st.session_state.manual_input = ""
    if 'svg_cache' not in st.session_state:
        st.session_state.svg_cache = {"route": None, "svg": ""}
    if 'debug_mode' not in st.session_state:
        st.session_state.debug_mode = False


def get_controller() -> ViewController:
    """Session's view controller"""
    return st.session_state.controller


def render_header():
    """Render the application header"""
    st.markdown('<p class="main-header">🚚 RouteReady</p>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">Small-biz route optimizer · Stateless & private</p>',
        unsafe_allow_html=True
    )
    st.markdown("---")


def render_alerts():
    """Render pending alerts with dismiss buttons"""
    controller = get_controller()
    for idx, alert in enumerate(list(controller.state.alerts)):
        cols = st.columns([10, 1])
        with cols[0]:
            if alert.level == "error":
                st.error(f"❌ {alert.message}")
            elif alert.level == "warning":
                st.warning(f"⚠️ {alert.message}")
            else:
                st.info(f"ℹ️ {alert.message}")
        with cols[1]:
            if st.button("✕", key=f"dismiss_alert_{idx}", help="Dismiss"):
                controller.dismiss_alert(idx)
                st.rerun()


def _add_manual_address():
    """Button callback: add typed address and clear the input"""
    controller = get_controller()
    controller.add_manual_address(st.session_state.manual_input)
    st.session_state.manual_input = ""


def render_landing_section():
    """Render the landing screen: upload or type addresses"""
    st.header("Optimize Your Routes")
    st.caption("Save fuel, time, & money. One address per line.")

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("📤 Upload CSV / List")
        render_upload_widget()

    with col2:
        st.subheader("⌨️ Manual Entry")
        render_manual_entry_widget()


def render_upload_widget():
    """File uploader; each uploaded file is consumed exactly once"""
    controller = get_controller()
    upload = st.file_uploader(
        "Upload address file",
        type=['csv', 'txt'],
        key=f"address_file_{st.session_state.uploader_key}",
        help="Plain text, one address per line. No column parsing is done."
    )

    if upload is not None:
        added = controller.upload_file(upload.getvalue(), upload.name)
        st.session_state.uploader_key += 1
        if added:
            logger.info(f"Uploaded {upload.name}: {added} addresses")
        st.rerun()


def render_manual_entry_widget():
    """Manual address entry"""
    st.text_area(
        "Address",
        key="manual_input",
        placeholder="Type a delivery address...",
        height=100,
        label_visibility="collapsed"
    )
    st.button("➕ Add Stop", on_click=_add_manual_address, width="stretch")


def render_configuration_section():
    """Render the configuration screen"""
    controller = get_controller()
    config = controller.state.config

    st.header("⚙️ Route Setup")

    new_depot = st.text_input(
        "Start Depot Address",
        value=config.depot,
        placeholder="Your starting point...",
    )

    col1, col2 = st.columns(2)
    with col1:
        new_return = st.toggle(
            "🔄 Round trip" if config.return_to_start else "➡️ One way",
            value=config.return_to_start,
            help="Return to the depot after the last stop"
        )
    with col2:
        new_vehicle_count = st.number_input(
            "Vehicles",
            min_value=1,
            max_value=100,
            value=int(config.vehicle_count),
            step=1,
        )

    if (new_depot, new_return, new_vehicle_count) != (config.depot, config.return_to_start, config.vehicle_count):
        controller.update_config(
            depot=new_depot,
            return_to_start=new_return,
            vehicle_count=int(new_vehicle_count),
        )
        st.rerun()

    st.markdown("---")
    st.subheader(f"📋 Stops ({len(controller.state.addresses)})")

    for address in list(controller.state.addresses):
        cols = st.columns([10, 1])
        with cols[0]:
            st.write(address.raw)
        with cols[1]:
            if st.button("X", key=f"remove_address_{address.id}", help="Remove this stop"):
                controller.remove_address(address.id)
                st.rerun()

    with st.expander("➕ Add more stops"):
        render_upload_widget()
        render_manual_entry_widget()

    st.markdown("---")
    if st.button("🚀 OPTIMIZE ROUTE", type="primary", width="stretch"):
        controller.start_optimization()
        st.rerun()


def render_processing_section():
    """Render the processing screen and run the pending optimization"""
    controller = get_controller()

    st.header("🛣️ Calculating Reality...")
    st.caption("Finding the most efficient sequence via Google Maps.")

    with st.spinner(f"Optimizing {len(controller.state.addresses)} stops..."):
        controller.run_optimization()

    st.rerun()


def route_miniature_svg(route) -> str:
    """SVG miniature, re-rendered only when the route list changes"""
    cache = st.session_state.svg_cache
    if cache["route"] is not route:
        map_settings = st.session_state.settings.map
        renderer = RouteProjectionRenderer(
            width=map_settings.width,
            height=map_settings.height,
            padding=map_settings.padding,
        )
        cache["route"] = route
        cache["svg"] = renderer.render(route)
    return cache["svg"]


def render_results_section():
    """Render the results screen"""
    controller = get_controller()
    state = controller.state
    route = state.optimized_route
    map_settings = st.session_state.settings.map
    next_stop = controller.next_stop

    # Reality view: embedded map on the active target
    target = embed_target(route, state.config)
    st.caption("REALITY PERSPECTIVE · " + ("Active Stop Analysis" if next_stop else "Returning Home"))
    components.html(
        embedded_map_iframe(target, zoom=map_settings.embed_zoom, height=map_settings.embed_height),
        height=map_settings.embed_height + 10,
    )

    col_map, col_progress = st.columns([1, 1])
    with col_map:
        st.markdown(
            f'<div class="mini-map">{route_miniature_svg(route)}</div>',
            unsafe_allow_html=True
        )
    with col_progress:
        st.metric("Route Progress", f"{controller.progress}%")
        st.progress(controller.progress / 100)
        st.metric("Stops", len(route))

    # Active stop card
    if next_stop is not None:
        st.markdown("---")
        st.markdown('<p class="stop-label">Up Next</p>', unsafe_allow_html=True)
        st.markdown(f'<p class="next-stop">{escape(next_stop.raw)}</p>', unsafe_allow_html=True)

        card_cols = st.columns([3, 1])
        with card_cols[0]:
            st.link_button("📍 LAUNCH NAVIGATION", stop_directions_link(next_stop), width="stretch")
        with card_cols[1]:
            if st.button("✅ DONE", key="complete_next", type="primary", width="stretch"):
                controller.toggle_complete(next_stop.id)
                st.rerun()

    # Full sequence
    st.markdown("---")
    header_cols = st.columns([3, 1])
    with header_cols[0]:
        st.subheader("🧭 Full Sequence")
    with header_cols[1]:
        if controller.full_route_link:
            st.link_button("View All", controller.full_route_link)

    for index, stop in enumerate(route):
        render_stop_row(stop, index, next_stop)

    with st.expander("📋 Route Table"):
        st.dataframe(route_dataframe(route), width="stretch")

    with st.expander("🗺️ Interactive Route Map"):
        render_interactive_map(route)

    st.markdown("---")
    footer_cols = st.columns(2)
    with footer_cols[0]:
        st.download_button(
            label="📸 Save Snapshot CSV",
            data=controller.snapshot_csv(),
            file_name=SnapshotCSVGenerator.FILENAME,
            mime=SnapshotCSVGenerator.MIME,
        )
    with footer_cols[1]:
        if st.button("🗑️ Destroy Session"):
            controller.reset()
            st.session_state.svg_cache = {"route": None, "svg": ""}
            st.rerun()


def render_stop_row(stop, index, next_stop):
    """Render one row of the full sequence"""
    controller = get_controller()
    cols = st.columns([1, 8, 1])

    with cols[0]:
        if stop.is_completed:
            st.markdown("### ✓")
        elif index == 0:
            st.markdown("### 🏠")
        else:
            st.markdown(f"### {index}")

    with cols[1]:
        label = "Departure Point" if index == 0 else f"Stop #{index}"
        st.markdown(f'<p class="stop-label">{label}</p>', unsafe_allow_html=True)
        css = "stop-done" if stop.is_completed else ""
        st.markdown(f'<span class="{css}">{escape(stop.raw)}</span>', unsafe_allow_html=True)
        if stop.error:
            st.caption(f"⚠️ {stop.error}")

    with cols[2]:
        is_next = next_stop is not None and stop.id == next_stop.id
        if not stop.is_completed and not is_next:
            if st.button("✓", key=f"complete_{stop.id}", help="Mark as done"):
                controller.toggle_complete(stop.id)
                st.rerun()
        elif stop.is_completed:
            if st.button("↺", key=f"undo_{stop.id}", help="Mark as pending"):
                controller.toggle_complete(stop.id)
                st.rerun()


def route_dataframe(route) -> pd.DataFrame:
    """Tabular view of the route"""
    return pd.DataFrame([
        {
            "Sequence": stop.sequence_order,
            "Address": stop.raw,
            "Phone": stop.phone or "-",
            "Latitude": stop.lat,
            "Longitude": stop.lng,
            "Distance (km)": (
                f"{stop.distance_from_previous:.2f}"
                if stop.distance_from_previous is not None else "-"
            ),
            "Status": "Done" if stop.is_completed else "Pending",
            "Valid": "✅" if stop.is_valid else "❌",
        }
        for stop in route
    ])


def render_interactive_map(route):
    """Folium map of geocoded stops"""
    try:
        visualizer = MapVisualizer(get_controller().state.config)
        route_map = visualizer.create_map(route)
        if route_map is None:
            st.info("ℹ️ No geocoded stops to show on the map.")
            return
        components.html(route_map._repr_html_(), height=500, scrolling=True)
    except Exception as e:
        st.error(f"❌ Error creating map: {str(e)}")
        if st.session_state.debug_mode:
            with st.expander("🔍 Debug info"):
                st.code(traceback.format_exc())


def render_sidebar():
    """Render the sidebar with additional info"""
    with st.sidebar:
        st.header("⚙️ Configuration")

        # Debug mode configuration
        with st.expander("🐛 Debug Mode", expanded=False):
            debug_enabled = st.checkbox("Enable debug logging", value=st.session_state.debug_mode)
            if debug_enabled != st.session_state.debug_mode:
                st.session_state.debug_mode = debug_enabled
                logging.getLogger().setLevel(logging.DEBUG if debug_enabled else logging.INFO)

        st.markdown("---")

        st.header("🔧 System Status")

        settings = st.session_state.settings
        if settings.optimizer.is_configured:
            st.success(f"✅ Optimizer: {settings.optimizer.model}")
        else:
            st.error("❌ GEMINI_API_KEY not configured (results will use entry order)")

        st.info(f"⏱️ Optimizer timeout: {settings.optimizer.timeout_seconds:.0f}s")

        st.markdown("---")

        st.header("ℹ️ About")

        st.markdown("""
        **RouteReady**

        Stateless delivery route optimization for small business fleets.
        Nothing is stored beyond this browser session.
        """)


def main():
    """Main application entry point"""

    # Initialize session state
    initialize_session_state()

    # Render sidebar
    render_sidebar()

    # Render header
    render_header()

    render_alerts()

    step = get_controller().step
    if step == AppState.LANDING:
        render_landing_section()
    elif step == AppState.CONFIG:
        render_configuration_section()
    elif step == AppState.PROCESSING:
        render_processing_section()
    elif step == AppState.RESULTS:
        render_results_section()

    # Footer
    st.markdown("---")
    st.markdown(
        '<p style="text-align: center; color: #666; font-size: 0.9rem;">'
        '🚚 RouteReady v0.1.0 | Built with ❤️ for Humanity'
        '</p>',
        unsafe_allow_html=True
    )


if __name__ == "__main__":
    main()
