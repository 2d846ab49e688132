"""
Response shapes for the ONVIF operations clients most commonly decode.

Alternative paths cover schema drift seen in the field: flattened responses,
elements moved out of their wrapper, and ONVIF 1.x vs 2.x layouts.
"""

from .parser import Field, ResponseShape


def _bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ('true', '1'):
        return True
    if lowered in ('false', '0'):
        return False
    raise ValueError(value)


DEVICE_INFORMATION = ResponseShape(
    name='GetDeviceInformation',
    response='GetDeviceInformationResponse',
    fields=(
        Field('manufacturer', ('Manufacturer',), required=True),
        Field('model', ('Model',), required=True),
        Field('firmware_version', ('FirmwareVersion',)),
        Field('serial_number', ('SerialNumber',)),
        Field('hardware_id', ('HardwareId',)),
    ),
)

HOSTNAME = ResponseShape(
    name='GetHostname',
    response='GetHostnameResponse',
    fields=(
        Field('name', ('HostnameInformation/Name', 'Name')),
        Field('from_dhcp', ('HostnameInformation/FromDHCP', 'FromDHCP',
                            'HostnameInformation@FromDHCP'), convert=_bool),
    ),
)

SYSTEM_DATE_AND_TIME = ResponseShape(
    name='GetSystemDateAndTime',
    response='GetSystemDateAndTimeResponse',
    fields=(
        Field('date_time_type', ('SystemDateAndTime/DateTimeType', 'DateTimeType')),
        Field('time_zone', ('SystemDateAndTime/TimeZone/TZ', 'TimeZone/TZ')),
        Field('year', ('SystemDateAndTime/UTCDateTime/Date/Year', 'UTCDateTime/Date/Year'), convert=int),
        Field('month', ('SystemDateAndTime/UTCDateTime/Date/Month', 'UTCDateTime/Date/Month'), convert=int),
        Field('day', ('SystemDateAndTime/UTCDateTime/Date/Day', 'UTCDateTime/Date/Day'), convert=int),
        Field('hour', ('SystemDateAndTime/UTCDateTime/Time/Hour', 'UTCDateTime/Time/Hour'), convert=int),
        Field('minute', ('SystemDateAndTime/UTCDateTime/Time/Minute', 'UTCDateTime/Time/Minute'), convert=int),
        Field('second', ('SystemDateAndTime/UTCDateTime/Time/Second', 'UTCDateTime/Time/Second'), convert=int),
    ),
)

CAPABILITIES = ResponseShape(
    name='GetCapabilities',
    response='GetCapabilitiesResponse',
    fields=(
        Field('device_url', ('Capabilities/Device/XAddr', 'Device/XAddr')),
        Field('media_url', ('Capabilities/Media/XAddr', 'Media/XAddr')),
        Field('imaging_url', ('Capabilities/Imaging/XAddr', 'Imaging/XAddr')),
        Field('events_url', ('Capabilities/Events/XAddr', 'Events/XAddr')),
        Field('ptz_url', ('Capabilities/PTZ/XAddr', 'PTZ/XAddr')),
        Field('analytics_url', ('Capabilities/Analytics/XAddr', 'Analytics/XAddr')),
    ),
)

USERS = ResponseShape(
    name='GetUsers',
    response='GetUsersResponse',
    records=('User',),
    fields=(
        Field('username', ('Username',), required=True),
        Field('user_level', ('UserLevel',)),
    ),
)

PROFILES = ResponseShape(
    name='GetProfiles',
    response='GetProfilesResponse',
    records=('Profiles',),
    fields=(
        Field('token', ('@token',), required=True),
        Field('name', ('Name',)),
        Field('encoder_token', ('VideoEncoderConfiguration@token',)),
        Field('encoding', ('VideoEncoderConfiguration/Encoding',)),
        Field('width', ('VideoEncoderConfiguration/Resolution/Width',), convert=int),
        Field('height', ('VideoEncoderConfiguration/Resolution/Height',), convert=int),
        Field('frame_rate_limit', ('VideoEncoderConfiguration/RateControl/FrameRateLimit',), convert=int),
        Field('bitrate_limit', ('VideoEncoderConfiguration/RateControl/BitrateLimit',), convert=int),
    ),
)

STREAM_URI = ResponseShape(
    name='GetStreamUri',
    response='GetStreamUriResponse',
    fields=(
        Field('uri', ('MediaUri/Uri', 'Uri'), required=True),
    ),
)

VIDEO_SOURCES = ResponseShape(
    name='GetVideoSources',
    response='GetVideoSourcesResponse',
    records=('VideoSources',),
    fields=(
        Field('token', ('@token',), required=True),
        Field('framerate', ('Framerate',), convert=float),
        Field('width', ('Resolution/Width',), convert=int),
        Field('height', ('Resolution/Height',), convert=int),
    ),
)

IMAGING_SETTINGS = ResponseShape(
    name='GetImagingSettings',
    response='GetImagingSettingsResponse',
    fields=(
        Field('ir_cut_filter', ('ImagingSettings/IrCutFilter', 'IrCutFilter'), required=True),
        Field('brightness', ('ImagingSettings/Brightness', 'Brightness'), convert=float),
    ),
)

OSDS = ResponseShape(
    name='GetOSDs',
    response='GetOSDsResponse',
    records=('OSDs', 'OSD'),
    fields=(
        Field('token', ('@token',), required=True),
        Field('video_source_token', ('VideoSourceConfigurationToken',)),
        Field('type', ('Type',)),
    ),
)
