"""
Soroban Clock Main Application

This is the entry point for the soroban clock service.
It wires together the clock, its outputs, and the API routes.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import HTMLResponse

# Managers
from managers.clock_manager import ClockManager
from managers.framebuffer_manager import FramebufferManager
from managers.websocket_manager import WebSocketManager

# API routes
from routes import setup_clock_routes, setup_system_routes

# Config
from config import (
    DEFAULT_PORT,
    PRODUCTION_PORT,
    DEFAULT_CANVAS_WIDTH,
    DEFAULT_CANVAS_HEIGHT,
    FRAMEBUFFER_ENABLED,
    SETTINGS_PATH,
    fit_canvas_size,
)
from soroban import ClockConfig

VERSION = "1.0.0"

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Global manager instances (will be initialized in lifespan)
clock_manager: ClockManager = None
framebuffer_manager: FramebufferManager = None
websocket_manager: WebSocketManager = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan management for FastAPI application.
    Handles startup and shutdown tasks.
    """
    global clock_manager, framebuffer_manager, websocket_manager

    # STARTUP
    logging.info("Starting soroban clock...")

    try:
        config = ClockConfig.load(SETTINGS_PATH)
        issues = config.validate()
        if issues:
            logging.warning(f"Clock settings issues, using defaults: {issues}")
            config = ClockConfig()

        width, height = DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT

        if FRAMEBUFFER_ENABLED:
            logging.info("Initializing framebuffer...")
            framebuffer_manager = FramebufferManager()
            if framebuffer_manager.initialize():
                # Fit the canvas to the screen the same way a browser window is fitted
                width, height = fit_canvas_size(*framebuffer_manager.get_size())

        websocket_manager = WebSocketManager()

        logging.info(f"Initializing clock ({width}x{height})...")
        clock_manager = ClockManager(
            width, height, config,
            framebuffer_manager=framebuffer_manager,
            websocket_manager=websocket_manager,
        )

        logging.info("Setting up API routes...")
        app.include_router(setup_clock_routes(clock_manager, websocket_manager))
        app.include_router(setup_system_routes(VERSION))

        await clock_manager.start()
        logging.info("Soroban clock started successfully!")

    except Exception as e:
        logging.error(f"Failed to start soroban clock: {e}")
        import traceback
        logging.error(f"Traceback: {traceback.format_exc()}")
        raise

    yield  # Application is running

    # SHUTDOWN
    logging.info("Shutting down soroban clock...")

    try:
        if clock_manager:
            await clock_manager.stop()

        if framebuffer_manager:
            framebuffer_manager.clear_screen()
            framebuffer_manager.cleanup()

        logging.info("Soroban clock shut down successfully!")

    except Exception as e:
        logging.error(f"Error during shutdown: {e}")


# Create FastAPI app with lifespan
app = FastAPI(
    title="Soroban Clock",
    description="Live clock rendered as an animated Japanese abacus",
    version=VERSION,
    lifespan=lifespan
)


@app.get("/", response_class=HTMLResponse)
async def web_interface():
    """Serve the web interface"""
    try:
        with open("index.html", "r") as f:
            return f.read()
    except FileNotFoundError:
        return """
        <h1>Soroban Clock</h1>
        <img src="/clock/frame.png" alt="soroban clock">
        <p>Live frames at <a href="/clock/frame.png">/clock/frame.png</a>,
        bead state at <a href="/clock/state">/clock/state</a>,
        API documentation at <a href="/docs">/docs</a></p>
        """


if __name__ == "__main__":
    import argparse
    import uvicorn

    # Parse command line arguments
    parser = argparse.ArgumentParser(description='Soroban Clock - animated abacus clock server')
    parser.add_argument('--production', action='store_true',
                        help='Run in production mode (port 80)')
    parser.add_argument('--port', type=int, default=None,
                        help='Custom port (overrides --production)')
    args = parser.parse_args()

    # Determine port
    if args.port:
        port = args.port
    elif args.production:
        port = PRODUCTION_PORT
    else:
        port = DEFAULT_PORT

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        log_level="info",
        reload=False
    )
