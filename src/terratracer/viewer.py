"""
TerraTracer Viewer Window

PyQt6 main window for the playback viewer: drone video and point cloud
side by side, flight data, the start/stop control with the alien
indicator, and the running detection log.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from PyQt6.QtCore import QTimer, QUrl, Qt
from PyQt6.QtGui import QColor, QFont, QPalette, QPixmap
from PyQt6.QtMultimedia import QAudioOutput, QMediaPlayer
from PyQt6.QtMultimediaWidgets import QVideoWidget
from PyQt6.QtWidgets import (QGridLayout, QHBoxLayout, QLabel, QListWidget,
                             QListWidgetItem, QMainWindow, QPushButton,
                             QStackedWidget, QVBoxLayout, QWidget)

from .config import ViewerConfig
from .models import DetectionEvent
from .playback import PlaybackController
from . import presenter

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

BG_COLOR = '#000000'
PANEL_COLOR = '#8B5A2B'
ACCENT_COLOR = '#FFA500'
TEXT_COLOR = '#FFFFFF'
ALIEN_COLOR = '#00FF00'
IDLE_COLOR = '#555555'

PLACEHOLDER_STYLE = (f"color: {TEXT_COLOR}; background-color: {PANEL_COLOR}; "
                     "border-radius: 8px; padding: 8px;")
FRAME_STYLE = f"border: 2px solid {TEXT_COLOR};"

# ============================================================================
# QT ADAPTERS
# ============================================================================


class QtTicker:
    """Periodic ticker on the Qt event loop."""

    def __init__(self, parent=None):
        self.timer = QTimer(parent)
        self.timer.setTimerType(Qt.TimerType.PreciseTimer)
        self.timer.timeout.connect(self._fire)
        self._callback: Optional[Callable[[], None]] = None

    def start(self, interval_ms: int, callback: Callable[[], None]):
        self._callback = callback
        self.timer.start(interval_ms)

    def stop(self):
        self.timer.stop()
        self._callback = None

    def _fire(self):
        if self._callback is not None:
            self._callback()


class QtMedia:
    """Plays the drone video from the beginning on restart."""

    def __init__(self, video_path: Path, parent=None):
        self.player = QMediaPlayer(parent)
        self.audio = QAudioOutput(parent)
        self.player.setAudioOutput(self.audio)
        self.player.setSource(QUrl.fromLocalFile(str(video_path)))
        self.player.errorOccurred.connect(self._on_error)

    def set_output(self, widget: QVideoWidget):
        self.player.setVideoOutput(widget)

    def restart(self):
        self.player.setPosition(0)
        self.player.play()

    def pause(self):
        self.player.pause()

    def _on_error(self, error, message):
        logger.error(f"Video playback error ({error}): {message}")


# ============================================================================
# MAIN WINDOW
# ============================================================================


class TerraTracerWindow(QMainWindow):
    def __init__(self, controller: PlaybackController, media: QtMedia,
                 asset_dir: Path, config: Optional[ViewerConfig] = None):
        super().__init__()
        self.controller = controller
        self.media = media
        self.asset_dir = Path(asset_dir)
        self.config = config or controller.config
        self.shown_detections = 0

        self.init_ui()

        controller.add_listener(self.refresh)
        controller.add_detection_listener(self.append_detections)
        self.refresh(controller)

    def init_ui(self):
        self.setWindowTitle(self.config.window_title)
        self.setGeometry(100, 100, 1400, 900)
        self.set_dark_theme()

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setSpacing(20)

        main_layout.addLayout(self.create_title_bar())
        main_layout.addLayout(self.create_media_row(), 5)
        main_layout.addLayout(self.create_data_row(), 3)

    def set_dark_theme(self):
        palette = QPalette()
        palette.setColor(QPalette.ColorRole.Window, QColor(0, 0, 0))
        palette.setColor(QPalette.ColorRole.WindowText, QColor(255, 255, 255))
        palette.setColor(QPalette.ColorRole.Base, QColor(10, 10, 10))
        palette.setColor(QPalette.ColorRole.Text, QColor(255, 255, 255))
        palette.setColor(QPalette.ColorRole.Button, QColor(30, 30, 30))
        palette.setColor(QPalette.ColorRole.ButtonText, QColor(255, 255, 255))
        self.setPalette(palette)

    def load_pixmap(self, name: str) -> Optional[QPixmap]:
        """Load an image from the asset directory, or None if unavailable."""
        path = self.asset_dir / name
        pixmap = QPixmap(str(path))
        if pixmap.isNull():
            logger.warning(f"Image not available: {path}")
            return None
        return pixmap

    def placeholder(self, text: str) -> QLabel:
        label = QLabel(text)
        label.setStyleSheet(PLACEHOLDER_STYLE)
        label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        return label

    def drone_icon(self, drone: Optional[QPixmap]) -> QLabel:
        icon = QLabel()
        icon.setFixedSize(120, 120)
        if drone is not None:
            icon.setPixmap(drone.scaled(
                120, 120, Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation))
        return icon

    def create_title_bar(self):
        """Application title flanked by drone images."""
        layout = QHBoxLayout()
        drone = self.load_pixmap(self.config.drone_image)

        title = QLabel(self.config.window_title)
        title.setFont(QFont("KafericeFindlandia", 48, QFont.Weight.Bold))
        title.setStyleSheet(f"color: {TEXT_COLOR};")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)

        layout.addWidget(self.drone_icon(drone))
        layout.addWidget(title, 1)
        layout.addWidget(self.drone_icon(drone))
        return layout

    def create_media_row(self):
        """Video surface and point cloud, each with a placeholder."""
        layout = QHBoxLayout()
        layout.setSpacing(20)

        # Drone video
        self.video_stack = QStackedWidget()
        self.video_stack.setStyleSheet(FRAME_STYLE)
        self.video_placeholder = self.placeholder("Drone view")
        self.video_widget = QVideoWidget()
        self.media.set_output(self.video_widget)
        self.video_stack.addWidget(self.video_placeholder)
        self.video_stack.addWidget(self.video_widget)
        layout.addWidget(self.video_stack)

        # Point cloud stand-in
        self.cloud_stack = QStackedWidget()
        self.cloud_stack.setStyleSheet(FRAME_STYLE)
        self.cloud_placeholder = self.placeholder("Point Cloud")
        self.cloud_view = QLabel()
        self.cloud_view.setAlignment(Qt.AlignmentFlag.AlignCenter)
        cloud = self.load_pixmap(self.config.point_cloud_image)
        if cloud is not None:
            self.cloud_view.setPixmap(cloud.scaled(
                640, 360, Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation))
        else:
            self.cloud_view.setText("Point cloud unavailable")
            self.cloud_view.setStyleSheet(f"color: {TEXT_COLOR};")
        self.cloud_stack.addWidget(self.cloud_placeholder)
        self.cloud_stack.addWidget(self.cloud_view)
        layout.addWidget(self.cloud_stack)

        return layout

    def create_data_row(self):
        """Flight data, controls and the detection log."""
        layout = QHBoxLayout()
        layout.setSpacing(20)

        # Flight data
        flight_panel = QWidget()
        flight_layout = QGridLayout(flight_panel)
        self.flight_labels: List[QLabel] = []
        self.flight_values: List[QLabel] = []
        for row in range(len(presenter.PLACEHOLDER_ROWS)):
            name = QLabel()
            name.setStyleSheet(f"color: {ACCENT_COLOR}; font-weight: bold;")
            value = QLabel()
            value.setStyleSheet(f"color: {TEXT_COLOR};")
            value.setAlignment(Qt.AlignmentFlag.AlignRight)
            flight_layout.addWidget(name, row, 0)
            flight_layout.addWidget(value, row, 1)
            self.flight_labels.append(name)
            self.flight_values.append(value)
        layout.addWidget(flight_panel, 4)

        # Start/stop control and alien indicator
        control_layout = QVBoxLayout()
        self.toggle_btn = QPushButton()
        self.toggle_btn.setFixedSize(60, 60)
        self.toggle_btn.clicked.connect(self.controller.toggle)
        control_layout.addWidget(self.toggle_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        self.alien_pixmaps: Dict[bool, Optional[QPixmap]] = {
            True: self.load_pixmap(self.config.alien_image),
            False: self.load_pixmap(self.config.alien_idle_image),
        }
        self.alien_indicator = QLabel()
        self.alien_indicator.setFixedSize(100, 100)
        self.alien_indicator.setAlignment(Qt.AlignmentFlag.AlignCenter)
        control_layout.addWidget(self.alien_indicator, alignment=Qt.AlignmentFlag.AlignCenter)
        layout.addLayout(control_layout, 1)

        # Detection log
        detection_panel = QWidget()
        detection_panel.setStyleSheet(f"background-color: {PANEL_COLOR}; border-radius: 10px;")
        detection_layout = QVBoxLayout(detection_panel)
        heading = QLabel("Alien detected:")
        heading.setFont(QFont("Helvetica", 13, QFont.Weight.Bold))
        heading.setStyleSheet(f"color: {TEXT_COLOR};")
        detection_layout.addWidget(heading)

        self.detection_list = QListWidget()
        self.detection_list.setFont(QFont("Courier", 10))
        self.detection_list.setStyleSheet(f"color: {TEXT_COLOR}; border: none;")
        detection_layout.addWidget(self.detection_list)
        layout.addWidget(detection_panel, 4)

        self.reset_detection_log()
        return layout

    # ========================================================================
    # STATE RENDERING
    # ========================================================================

    def refresh(self, controller: PlaybackController):
        """Render the controller state. Called after every state change."""
        state = controller.state

        for (name, value), name_label, value_label in zip(
                presenter.flight_rows(controller.current_sample),
                self.flight_labels, self.flight_values):
            name_label.setText(name + ":")
            value_label.setText(value)

        self.video_stack.setCurrentIndex(1 if state.playing else 0)
        self.cloud_stack.setCurrentIndex(
            1 if state.playing and state.point_cloud_visible else 0)

        self.toggle_btn.setText(presenter.toggle_label(state.playing))
        self.toggle_btn.setStyleSheet(
            f"background-color: {presenter.toggle_color(state.playing)}; "
            f"color: {TEXT_COLOR}; font-weight: bold; "
            f"border: 2px solid {TEXT_COLOR}; border-radius: 30px;")

        self.update_alien_indicator(state.detected_now)

        if not state.seen and self.shown_detections:
            self.reset_detection_log()

    def update_alien_indicator(self, detected: bool):
        pixmap = self.alien_pixmaps[detected]
        if pixmap is not None:
            self.alien_indicator.setPixmap(pixmap.scaled(
                100, 100, Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation))
        else:
            self.alien_indicator.setText("ALIEN")
            color = ALIEN_COLOR if detected else IDLE_COLOR
            self.alien_indicator.setStyleSheet(f"color: {color}; font-weight: bold;")

    def reset_detection_log(self):
        """Show the empty-log message."""
        self.detection_list.clear()
        self.shown_detections = 0
        item = QListWidgetItem(presenter.detection_lines([])[0])
        font = item.font()
        font.setItalic(True)
        item.setFont(font)
        item.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
        self.detection_list.addItem(item)

    def append_detections(self, new_detections: List[DetectionEvent]):
        """Append newly seen detections to the log."""
        lines = presenter.appended_lines(new_detections, self.shown_detections)
        if not lines:
            return
        if self.shown_detections == 0:
            self.detection_list.clear()
        self.detection_list.addItems(lines)
        self.shown_detections += len(new_detections)
        self.detection_list.scrollToBottom()

    def closeEvent(self, event):
        self.controller.stop()
        super().closeEvent(event)
