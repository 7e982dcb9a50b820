AVI_MEDIA_TYPE = "video/x-msvideo"
AVI_FILE_SUFFIX = ".avi"

DEFAULT_OUTPUT_FILENAME = "output.avi"

# Lower and upper bound of the ffmpeg mjpeg qscale (lower is better quality)
MJPEG_QSCALE_BEST = 2
MJPEG_QSCALE_WORST = 31
