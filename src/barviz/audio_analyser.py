import logging
import sys

import librosa
import numpy as np

from barviz.constants import HOP_LENGTH, N_FFT, SILENCE_FLOOR_DB

logger = logging.getLogger(__name__)


class AudioAnalyser:
    """
    Loads an audio file and exposes its loudness over time as dB readings,
    the same scale an audio player's level meter reports (0 dB = full scale).
    """

    def __init__(self, filepath):
        logger.info(f"[+] Loading audio: {filepath}...")
        try:
            # Mono, original sampling rate
            self.y, self.sr = librosa.load(filepath, sr=None, mono=True)
            self.duration = librosa.get_duration(y=self.y, sr=self.sr)
        except Exception as e:
            sys.exit(f"[!] Error loading audio file: {e}")

        logger.info("[+] Measuring loudness...")
        self._calculate_levels()

    def _calculate_levels(self):
        """
        Compute frame-wise RMS and convert it to decibels relative to full scale.
        """
        rms = librosa.feature.rms(y=self.y, frame_length=N_FFT, hop_length=HOP_LENGTH)
        # ref=1.0 keeps the readings absolute; librosa clamps silence at amin
        self.levels_db = librosa.amplitude_to_db(rms[0], ref=1.0, top_db=None)

    @property
    def frame_count(self):
        return len(self.levels_db)

    def get_level_at_time(self, t):
        """
        Returns the loudness in dB for timestamp `t`.
        """
        if self.frame_count == 0 or t < 0 or t > self.duration:
            return SILENCE_FLOOR_DB

        # Convert time to frame index; early timestamps can map below zero
        frame_index = librosa.time_to_frames(t, sr=self.sr, hop_length=HOP_LENGTH, n_fft=N_FFT)
        frame_index = int(np.clip(frame_index, 0, self.frame_count - 1))

        return float(self.levels_db[frame_index])
